from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sqladmin import Admin

from app.admin.auth import AdminAuth
from app.admin.views import AccountAdmin
from app.core.exception_handlers import register_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import add_cors_middleware, add_request_logging_middleware
from app.core.settings import get_settings
from app.db.engine import engine
from app.router import api_router
from app.uploads.storage import UploadStorage

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    UploadStorage(settings.upload_dir, settings.upload_url_prefix).ensure_directories()
    yield


app = FastAPI(title="Accounts", version="0.1.0", lifespan=lifespan)

app.include_router(api_router)

# Uploaded files are public at <prefix>/<path relative to the upload root>.
_settings = get_settings()
app.mount(
    _settings.upload_url_prefix,
    StaticFiles(directory=_settings.upload_dir, check_dir=False),
    name="uploads",
)

add_request_logging_middleware(app)
add_cors_middleware(app)
register_exception_handlers(app)

# SQLAdmin UI lives under /panel; /admin is the JSON admin API.
admin = Admin(
    app=app,
    engine=engine,
    authentication_backend=AdminAuth(),
    base_url="/panel",
)
admin.add_view(AccountAdmin)
