"""Admin API: sign-in plus create, update and delete for every content type."""

import dataclasses
import typing

import fastapi
import fastapi.security

from ..backend.base import Backend
from ..backend.client import get_backend
from ..content import models, services
from ..content.routes import notification_response, serialize
from ..errors import BackendError
from . import dashboard
from .auth import AuthProvider

admin_router = fastapi.APIRouter(prefix='/admin')

bearer = fastapi.security.HTTPBearer(auto_error=False)


@dataclasses.dataclass
class Submission:
    """Text fields and the optional image from a multipart editor form."""

    values: dict[str, str]
    image: models.ImageFile | None = None


# Dependencies
def get_auth(
    backend: Backend = fastapi.Depends(get_backend),
    credentials: fastapi.security.HTTPAuthorizationCredentials | None = fastapi.Depends(
        bearer
    ),
) -> AuthProvider:
    """Resolve the editor session from the bearer token, or answer 401."""
    provider = AuthProvider(backend)
    if credentials is None or provider.restore(credentials.credentials) is None:
        raise fastapi.HTTPException(
            status_code=401,
            detail='Not authenticated',
            headers={'WWW-Authenticate': 'Bearer'},
        )
    return provider


def get_dashboard(
    auth: AuthProvider = fastapi.Depends(get_auth),
) -> dashboard.AdminDashboard:
    """Get a dashboard acting as the signed-in editor."""
    return dashboard.AdminDashboard(
        services.ContentServices(auth.scoped_backend()), auth
    )


async def read_submission(request: fastapi.Request) -> Submission:
    """Split a multipart form into text values and the uploaded image."""
    form = await request.form()
    submission = Submission(values={})
    for key, value in form.multi_items():
        if isinstance(value, str):
            submission.values[key] = value
        elif key == 'image' and value.filename:
            content = await value.read()
            submission.image = models.ImageFile(
                value.filename,
                content,
                value.content_type or 'application/octet-stream',
            )
    return submission


Dashboard = typing.Annotated[dashboard.AdminDashboard, fastapi.Depends(get_dashboard)]
EditorForm = typing.Annotated[Submission, fastapi.Depends(read_submission)]


def check_kind(kind: str) -> None:
    if kind not in dashboard.SECTIONS:
        raise fastapi.HTTPException(status_code=404, detail=f'Unknown section {kind}')


# Session
@admin_router.post('/login')
def login(
    email: typing.Annotated[str, fastapi.Form()],
    password: typing.Annotated[str, fastapi.Form()],
    backend: Backend = fastapi.Depends(get_backend),
) -> dict[str, typing.Any]:
    """Exchange editor credentials for an access token."""
    try:
        session = AuthProvider(backend).sign_in(email, password)
    except BackendError as exc:
        raise fastapi.HTTPException(status_code=401, detail=str(exc)) from exc
    return {
        'access_token': session.access_token,
        'token_type': 'bearer',
        'user': dataclasses.asdict(session.user),
    }


@admin_router.post('/logout')
def logout(auth: AuthProvider = fastapi.Depends(get_auth)) -> dict[str, str]:
    auth.sign_out()
    return {'message': 'Signed out'}


# Overview and messages
@admin_router.get('/overview')
def overview(board: Dashboard) -> dict[str, typing.Any]:
    """Item counts per section, plus any sections that failed to load."""
    board.select_tab(dashboard.OVERVIEW)
    return {
        'counts': board.overview(),
        'errors': {kind: s.error for kind, s in board.tabs.items() if s.error},
    }


@admin_router.post('/messages/{message_id}/read')
def read_message(message_id: str, board: Dashboard) -> dict[str, typing.Any]:
    """Open a message, marking it read."""
    message = board.find(dashboard.MESSAGES, message_id)
    if message is None:
        raise fastapi.HTTPException(status_code=404, detail='Message not found')
    note = board.view_message(message_id)
    if note is not None:
        notification_response(note)
    return serialize(message.model_copy(update={'read': True}))


# Content sections
@admin_router.get('/{kind}')
def list_section(kind: str, board: Dashboard) -> dict[str, typing.Any]:
    check_kind(kind)
    board.select_tab(kind)
    state = board.tabs[kind]
    return {'items': [serialize(item) for item in state.items], 'error': state.error}


@admin_router.post('/{kind}')
def create_item(kind: str, board: Dashboard, submission: EditorForm) -> dict[str, str]:
    check_kind(kind)
    if kind == dashboard.MESSAGES:
        raise fastapi.HTTPException(
            status_code=405, detail='Messages cannot be created here'
        )
    form = board.open_form(kind)
    form.load(submission.values)
    form.set_image(submission.image)
    return notification_response(form.submit())


@admin_router.put('/{kind}/{item_id}')
def update_item(
    kind: str, item_id: str, board: Dashboard, submission: EditorForm
) -> dict[str, str]:
    check_kind(kind)
    if kind == dashboard.MESSAGES:
        raise fastapi.HTTPException(status_code=405, detail='Messages cannot be edited')
    item = board.find(kind, item_id)
    if item is None:
        raise fastapi.HTTPException(status_code=404, detail='Item not found')
    form = board.open_form(kind, item)
    form.load(submission.values)
    form.set_image(submission.image)
    return notification_response(form.submit())


@admin_router.delete('/{kind}/{item_id}')
def delete_item(kind: str, item_id: str, board: Dashboard) -> dict[str, str]:
    check_kind(kind)
    board.confirm_delete(item_id, kind)
    note = board.handle_delete()
    assert note is not None
    return notification_response(note)
