from typing import Any, Dict, Optional


def ok(data: Any = None, *, message: Optional[str] = None, with_count: bool = False) -> Dict:
    """Success envelope: {success, data?, count?, message?}."""
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if with_count:
        body["count"] = len(data) if data is not None else 0
    if message:
        body["message"] = message
    return body


def fail(error: str, **extra: Any) -> Dict:
    return {"success": False, "error": error, **extra}
