# nextplay/routes/upload.py
import logging

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from nextplay.authz import require_parent
from nextplay.errors import BadRequest
from nextplay.security.policy import Principal
from nextplay.storage import is_image, save_photo
from nextplay.utils.logger import log_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("")
async def upload_images(request: Request, principal: Principal = Depends(require_parent)):
    # form is read after the role check so admins are refused before any upload is parsed
    form = await request.form()
    images = [f for f in form.getlist("images") if isinstance(f, UploadFile)]
    if not images:
        raise BadRequest("No images provided")

    urls = []
    for image in images:
        if not is_image(image.content_type, image.filename):
            logger.info("skipping non-image upload %r (%s)", image.filename, image.content_type)
            continue
        data = await image.read()
        urls.append(save_photo(principal.identity_id, image.filename, data, image.content_type))

    if not urls:
        raise BadRequest("No images provided")

    log_activity(user_id=principal.identity_id, action="upload_photos", metadata={"count": len(urls)})
    return {"success": True, "urls": urls}
