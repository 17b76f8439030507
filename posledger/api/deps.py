from fastapi import HTTPException, Request

from posledger.repositories import Repositories


def get_repos(request: Request) -> Repositories:
    """Repositories created by the app lifespan."""
    return request.app.state.repos


def found(record, what: str):
    """404 for the None a repository returns on a missing or deleted row."""
    if record is None:
        raise HTTPException(status_code=404, detail=f"{what} not found")
    return record
