from contextlib import contextmanager

from fastapi import HTTPException, status

from services.errors import InvalidArgument, NotFound, StoreUnavailable


@contextmanager
def store_errors(failure_message: str, not_found_message: str = "Not found"):
    """Turn store failures into HTTP errors with a fixed message per operation."""
    try:
        yield
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_message) from exc
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StoreUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_message) from exc
