"""
Python port of Chris Sims' csminwel quasi-Newton minimizer.

csminwel is robust to cliffs in the objective: points where the model
cannot be evaluated show up as very large values, and the search backs off
rather than failing. The gradient is computed by forward differences.
"""
import logging
import numpy as np

from .results import OptimizationResult, trace_entry, format_trace_entry

logger = logging.getLogger(__name__)

RETCODE_MESSAGES = {
    0: "normal step",
    1: "zero gradient",
    2: "back and forth on step length never finished",
    3: "smallest step still improving too slow",
    4: "back and forth on step length never finished",
    5: "largest step still improving too fast",
    6: "smallest step still improving too slow, reversed gradient",
    7: "warning: possible inaccuracy in H matrix",
}

# csminit line search constants
ANGLE = 0.005
THETA = 0.3
FCHANGE = 1000
MINLAMB = 1e-9
MINDFAC = 0.01


def numgrad(fcn, x, delta=1e-6):
    """
    Forward-difference gradient. Components of magnitude 1e15 or more are
    zeroed and flag the gradient as bad.
    """
    f0 = fcn(x)
    g = np.zeros(len(x))
    badg = False
    for i in range(len(x)):
        x_step = x.copy()
        x_step[i] += delta
        g0 = (fcn(x_step) - f0) / delta
        if abs(g0) < 1e15:
            g[i] = g0
        else:
            badg = True
    return g, badg


def bfgsi(H0, dg, dx):
    """
    BFGS update of the inverse Hessian H0 given a change in gradient dg
    over the step dx.
    """
    Hdg = H0 @ dg
    dgdx = dg @ dx
    if abs(dgdx) > 1e-12:
        return (H0 + (1 + (dg @ Hdg) / dgdx) * np.outer(dx, dx) / dgdx
                - (np.outer(dx, Hdg) + np.outer(Hdg, dx)) / dgdx)
    logger.warning("bfgs update failed: |dg'dx| = %g, |dx| = %g, |dg| = %g",
                   abs(dgdx), np.linalg.norm(dx), np.linalg.norm(dg))
    return H0


def csminit(fcn, x0, f0, g0, badg, H0):
    """
    Line search along -H0*g0. Returns (fhat, xhat, fcount, retcode).
    """
    fcount = 0
    lambda_ = 1.0
    xhat = x0
    fhat = f0
    g = g0
    gnorm = np.linalg.norm(g)

    if gnorm < 1e-12 and not badg:
        return fhat, xhat, fcount, 1

    dx = -H0 @ g
    dxnorm = np.linalg.norm(dx)
    if dxnorm > 1e12:
        logger.debug("Near-singular H problem")
        dx = dx * FCHANGE / dxnorm
    dfhat = dx @ g0

    if not badg:
        # Keep the search direction from being too close to orthogonal to the gradient
        a = -dfhat / (gnorm * dxnorm)
        if a < ANGLE:
            dx = dx - (ANGLE * dxnorm / gnorm + dfhat / (gnorm * gnorm)) * g
            dx = dx * dxnorm / np.linalg.norm(dx)
            dfhat = dx @ g

    done = False
    factor = 3.0
    shrink = True
    lambda_peak = 0.0
    lambda_max = np.inf
    f_peak = f0
    retcode = 0

    while not done:
        dxtest = x0 + dx * lambda_
        f = fcn(dxtest)
        fcount += 1
        if f < fhat:
            fhat = f
            xhat = dxtest

        shrink_signal = ((not badg and (f0 - f < max(-THETA * dfhat * lambda_, 0)))
                         or (badg and (f0 - f) < 0))
        grow_signal = not badg and lambda_ > 0 and (f0 - f > -(1 - THETA) * dfhat * lambda_)

        if shrink_signal and (lambda_ > lambda_peak or lambda_ < 0):
            if lambda_ > 0 and (not shrink or lambda_ / factor <= lambda_peak):
                shrink = True
                factor = factor**0.6
                while lambda_ / factor <= lambda_peak:
                    factor = factor**0.6
                if abs(factor - 1) < MINDFAC:
                    retcode = 2 if abs(lambda_) < 4 else 7
                    done = True
            if lambda_peak < lambda_ < lambda_max:
                lambda_max = lambda_
            lambda_ = lambda_ / factor
            if abs(lambda_) < MINLAMB:
                if lambda_ > 0 and f0 <= fhat:
                    # Try going against the gradient, which may be inaccurate
                    lambda_ = -lambda_ * factor**6
                else:
                    retcode = 6 if lambda_ < 0 else 3
                    done = True
        elif (grow_signal and lambda_ > 0) or (shrink_signal and 0 < lambda_ <= lambda_peak):
            if shrink:
                shrink = False
                factor = factor**0.6
                if abs(factor - 1) < MINDFAC:
                    retcode = 4 if abs(lambda_) < 4 else 7
                    done = True
            if f < f_peak and lambda_ > 0:
                f_peak = f
                lambda_peak = lambda_
                if lambda_max <= lambda_peak:
                    lambda_max = lambda_peak * factor * factor
            lambda_ = lambda_ * factor
            if abs(lambda_) > 1e20:
                retcode = 5
                done = True
        else:
            done = True
            retcode = 7 if factor < 1.2 else 0

    return fhat, xhat, fcount, retcode


def csminwel(fcn, x0, H0, xtol=1e-32, ftol=1e-14, grtol=1e-8, iterations=1000,
             store_trace=False, show_trace=False, extended_trace=False,
             verbose="none", rng=None):
    """
    Minimizes fcn starting from x0 with initial inverse Hessian H0.

    Stops after `iterations` iterations, when the objective improves by less
    than ftol, when x moves by less than xtol, or when the gradient's largest
    component falls below grtol.

    Returns (OptimizationResult, H) where H is the final inverse Hessian
    estimate.
    """
    rng = np.random.default_rng() if rng is None else rng
    calls = {"f": 0, "g": 0}

    def f_counted(x):
        calls["f"] += 1
        return fcn(x)

    def grad(x):
        calls["g"] += 1
        return numgrad(f_counted, x)

    x = np.array(x0, dtype=float)
    H = np.array(H0, dtype=float)
    nx = len(x)

    f_x = f_counted(x)
    if f_x > 1e50:
        raise ValueError(f"Bad initial guess: objective value {f_x}")

    gr, badg = grad(x)
    gh = None

    trace = []

    def record(iteration, retcode=None):
        extended = None
        if extended_trace:
            extended = {"x": x.copy(), "g": gr.copy(), "h": H.copy(), "retcode": retcode}
        entry = trace_entry(iteration, f_x, np.linalg.norm(gr), extended)
        if store_trace:
            trace.append(entry)
        if show_trace:
            print(format_trace_entry(entry))

    if show_trace:
        print("  Iter     Function value    Gradient norm")
    record(0)

    itct = 0
    x_converged = f_converged = gr_converged = False
    done = False

    while not done:
        itct += 1
        gr1 = gr2 = gr3 = None
        badg1 = badg2 = badg3 = True

        f1, x1, _, retcode1 = csminit(f_counted, x, f_x, gr, badg, H)

        if retcode1 != 1:
            if retcode1 in (2, 4):
                wall1 = True
                badg1 = True
            else:
                gr1, badg1 = grad(x1)
                wall1 = badg1

            if wall1 and nx > 1:
                # Bad gradient or back and forth on step length.
                # Possibly at a cliff edge, try perturbing the search direction.
                Hcliff = H + np.diag(np.diag(H) * rng.random(nx))
                logger.debug("Cliff. Perturbing search direction.")
                f2, x2, _, retcode2 = csminit(f_counted, x, f_x, gr, badg, Hcliff)

                if f2 < f_x:
                    if retcode2 in (2, 4):
                        wall2 = True
                        badg2 = True
                    else:
                        gr2, badg2 = grad(x2)
                        wall2 = badg2

                    if wall2:
                        logger.debug("Cliff again. Try traversing.")
                        if np.linalg.norm(x2 - x1) < 1e-13:
                            f3, x3, badg3, retcode3 = f_x, x, True, 101
                        else:
                            gcliff = ((f2 - f1) / (np.linalg.norm(x2 - x1)**2)) * (x2 - x1)
                            f3, x3, _, retcode3 = csminit(f_counted, x, f_x, gcliff, False, np.eye(nx))
                            if retcode3 in (2, 4):
                                badg3 = True
                            else:
                                gr3, badg3 = grad(x3)
                    else:
                        f3, x3, badg3, retcode3 = f_x, x, True, 101
                else:
                    f3, x3, badg3, retcode3 = f_x, x, True, 101
            else:
                f2 = f3 = f_x
                x2 = x3 = x
                badg2 = badg3 = True
                retcode2 = retcode3 = 101
        else:
            f1 = f2 = f3 = f_x
            x2 = x3 = x1
            retcode2 = retcode3 = retcode1

        # Pick the best of the three candidate points
        if f3 < f_x - ftol and not badg3:
            fh, xh, gh, badgh, retcodeh = f3, x3, gr3, badg3, retcode3
        elif f2 < f_x - ftol and not badg2:
            fh, xh, gh, badgh, retcodeh = f2, x2, gr2, badg2, retcode2
        elif f1 < f_x - ftol and not badg1:
            fh, xh, gh, badgh, retcodeh = f1, x1, gr1, badg1, retcode1
        else:
            ih = int(np.argmin([f1, f2, f3]))
            fh = [f1, f2, f3][ih]
            xh = [x1, x2, x3][ih]
            retcodeh = [retcode1, retcode2, retcode3][ih]
            if gh is None:
                gh, badgh = grad(xh)
            badgh = True

        stuck = abs(fh - f_x) < ftol
        if not badg and not badgh and not stuck:
            H = bfgsi(H, gh - gr, xh - x)

        x_converged = bool(np.max(np.abs(xh - x), initial=0.0) < xtol)
        f_converged = stuck
        gr_converged = (not badgh) and bool(np.max(np.abs(gh), initial=0.0) < grtol)

        logger.debug("Iteration %d: f = %.9g, %s", itct, fh, RETCODE_MESSAGES.get(retcodeh, "no improvement"))

        f_x, x, gr, badg = fh, xh, gh, badgh
        record(itct, retcodeh)

        if itct >= iterations or x_converged or f_converged or gr_converged:
            done = True

    logger.info("csminwel finished after %d iterations with f = %.9g", itct, f_x)

    result = OptimizationResult(
        method="csminwel",
        initial_x=np.array(x0, dtype=float),
        minimum=x,
        f_minimum=f_x,
        iterations=itct,
        iteration_converged=itct >= iterations and not (x_converged or f_converged or gr_converged),
        x_converged=x_converged,
        f_converged=f_converged,
        gr_converged=gr_converged,
        f_calls=calls["f"],
        g_calls=calls["g"],
        trace=trace,
    )
    return result, H
