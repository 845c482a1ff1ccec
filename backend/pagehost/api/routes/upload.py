import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from starlette.datastructures import UploadFile

from pagehost.api.deps import IngestionDep
from pagehost.core.errors import BadRequest, MethodNotAllowed
from pagehost.services.ingestion import media_type_for_upload

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)


@router.post("/upload", response_class=PlainTextResponse)
async def upload_site(request: Request, ingestion: IngestionDep) -> PlainTextResponse:
    """
    上传站点：表单中唯一的文件字段名即为主机名，文件为 .tar.gz 归档。
    """
    async with request.form() as form:
        uploads = [
            (field, value)
            for field, value in form.multi_items()
            if isinstance(value, UploadFile)
        ]
        if not uploads:
            raise BadRequest("no file supplied")
        if len(uploads) > 1:
            raise BadRequest("multiple files supplied")

        hostname, upload = uploads[0]
        # 解压和写库都是阻塞操作，放到线程池执行
        summary = await run_in_threadpool(
            ingestion.ingest,
            hostname,
            upload.file,
            media_type_for_upload(upload.filename),
        )

    return PlainTextResponse(f"uploaded site {summary.hostname} ({summary.file_count} files)")


@router.api_route(
    "/upload",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
def upload_wrong_method() -> None:
    raise MethodNotAllowed("only HTTP POST requests accepted")
