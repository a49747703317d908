import contextvars

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")
_actor_role: contextvars.ContextVar[str] = contextvars.ContextVar("actor_role", default="-")


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def set_actor_role(role: str) -> None:
    _actor_role.set(role)


def get_actor_role() -> str:
    return _actor_role.get()


def clear_context() -> None:
    _request_id.set("-")
    _actor_role.set("-")
