import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .auth import CurrentUser
from .config import Settings, get_settings, settings
from .dependencies import get_catalog, get_current_user
from .errors import CatalogError, RecordValidationError
from .schemas.records_schemas import (
    DeleteResponse,
    ErrorResponse,
    MovieShowResponse,
    RecordPage,
    ValidationErrorResponse,
)
from .services.catalog_service import CatalogService
from .utils.uploads import read_record_submission

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    yield


app = FastAPI(title="Media Catalog API", lifespan=lifespan)
app.mount(settings.UPLOAD_URL_PREFIX,
          StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

OWNED_RECORD_ERRORS = {
    404: {'model': ErrorResponse},
    403: {'model': ErrorResponse},
    500: {'model': ErrorResponse},
}


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    body = {'detail': exc.message}
    if isinstance(exc, RecordValidationError):
        body['errors'] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=body)


@app.get('/health')
async def health():
    return {'status': 'OK', 'message': 'Server is running'}


@app.get('/records', response_model=RecordPage, responses={500: {'model': ErrorResponse}})
async def list_records(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: Optional[str] = None,
    type: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias='sortBy'),
    user: CurrentUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog)
):
    return await catalog.list_records(
        user.id, page=page, limit=limit, search=search,
        record_type=type, sort_by=sort_by)


@app.get('/records/{record_id}', response_model=MovieShowResponse,
         responses=OWNED_RECORD_ERRORS)
async def get_record(
    record_id: str,
    user: CurrentUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog)
):
    return await catalog.get_record(record_id, user.id)


@app.post('/records', response_model=MovieShowResponse,
          status_code=status.HTTP_201_CREATED,
          responses={400: {'model': ValidationErrorResponse}, 500: {'model': ErrorResponse}})
async def create_record(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog),
    config: Settings = Depends(get_settings)
):
    payload, poster = await read_record_submission(
        request, config.UPLOAD_DIR, config.UPLOAD_URL_PREFIX, config.MAX_UPLOAD_BYTES)
    return await catalog.create_record(user.id, payload, poster)


@app.put('/records/{record_id}', response_model=MovieShowResponse,
         responses={**OWNED_RECORD_ERRORS, 400: {'model': ValidationErrorResponse}})
async def update_record(
    record_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog),
    config: Settings = Depends(get_settings)
):
    payload, poster = await read_record_submission(
        request, config.UPLOAD_DIR, config.UPLOAD_URL_PREFIX, config.MAX_UPLOAD_BYTES)
    return await catalog.update_record(record_id, user.id, payload, poster)


@app.delete('/records/{record_id}', response_model=DeleteResponse,
            responses=OWNED_RECORD_ERRORS)
async def delete_record(
    record_id: str,
    user: CurrentUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog)
):
    return await catalog.delete_record(record_id, user.id)
