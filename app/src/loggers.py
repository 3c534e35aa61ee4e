from app.src import openobserve
from app.src.schemas import RequestInfo


def logEvent(requestInfo: RequestInfo, data: dict) -> None:
    """
    Log an audit event to OpenObserve with request context.

    Args:
        requestInfo (RequestInfo): Metadata about the current request.
        data (dict): The affected resource, as returned to the client.

    Notes:
        - Automatically attaches `_method` and `_path`.
    """
    logDetails = {
        "_method": requestInfo.method,
        "_path": requestInfo.path,
    }
    logDetails.update(data)
    openobserve.logEvent(logDetails)
