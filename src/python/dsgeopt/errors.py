class ParamBoundsError(ValueError):
    """
    Raised when a free parameter is set outside of its value bounds.
    """
    def __init__(self, name, value, bounds):
        self.name = name
        self.value = value
        self.bounds = bounds
        super().__init__(f"Parameter {name} = {value} is outside of its bounds {bounds}")


class GensysError(Exception):
    """
    Raised when gensys finds no stable solution or no unique one.
    eu = [existence, uniqueness], 1 meaning the property holds.
    """
    def __init__(self, msg="", eu=None):
        self.eu = eu
        if eu is not None:
            msg = f"{msg} (eu = {list(eu)})"
        super().__init__(msg)


class UnsupportedMethodError(ValueError):
    pass


class ProposalError(RuntimeError):
    pass
