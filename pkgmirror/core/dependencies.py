from fastapi import Request

from pkgmirror.domain.models import MirrorSettings


def get_settings(request: Request) -> MirrorSettings:
    """Settings the application was created with (see main.create_app)."""
    return request.app.state.settings
