"""Exception types raised by the decision engine."""


class TriggerScaleError(Exception):
    """Base class for all engine errors."""


class InvalidConfiguration(TriggerScaleError, ValueError):
    """A ScalableObject or trigger record failed validation at load time."""

    def __init__(self, message, field=None):
        super().__init__(f"{field}: {message}" if field else message)
        self.field = field


class AdapterUnavailable(TriggerScaleError):
    """A single trigger's metric source failed or timed out for one tick."""

    def __init__(self, trigger, cause=None):
        reason = cause if cause is not None else "unknown error"
        if isinstance(cause, BaseException):
            reason = f"{type(cause).__name__}: {cause}" if str(cause) else type(cause).__name__
        super().__init__(f"trigger {trigger} unavailable ({reason})")
        self.trigger = trigger
        self.cause = cause


class AllTriggersUnavailable(TriggerScaleError):
    """Every trigger of an object was unavailable; the previous decision is held."""

    def __init__(self, identity):
        super().__init__(f"all triggers unavailable for {identity}, holding previous decision")
        self.identity = identity


class ExecutorFailure(TriggerScaleError):
    """The scaling executor could not apply a replica count."""

    def __init__(self, identity, replicas, cause=None):
        super().__init__(f"failed to set {identity} to {replicas} replicas: {cause}")
        self.identity = identity
        self.replicas = replicas
        self.cause = cause


class UnknownScalableObject(TriggerScaleError, KeyError):
    """No loop is registered under the given identity."""

    def __init__(self, identity):
        super().__init__(identity)
        self.identity = identity

    def __str__(self):
        return f"no scalable object registered as {self.identity}"
