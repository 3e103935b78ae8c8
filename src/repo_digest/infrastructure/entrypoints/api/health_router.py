from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter, Request

router = APIRouter()


def _package_version() -> str:
    try:
        return version("repo-digest")
    except PackageNotFoundError:
        return "0.0.0"


@router.get("/health")
def health_check(request: Request):
    """Liveness plus the upstream this backend talks to and its content-fetch cap."""
    settings = request.app.state.settings
    return {
        "status": "ok",
        "service": "repo-digest",
        "version": _package_version(),
        "github": settings.github_api_base_url,
        "maxFiles": settings.backend_max_files,
    }
