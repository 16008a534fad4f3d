import time
from email.utils import formatdate

from fastapi import APIRouter, Response

from picwall.config import IMAGE_URL_CACHE_SECONDS
from picwall.utils.schemas import CamelModel, Envelope
from . import controller

# Defining the router
router = APIRouter(
    prefix="/api/images",
    tags=["Images"],
)


class ImageUrlData(CamelModel):
    url: str


@router.get("/{key:path}", response_model=Envelope[ImageUrlData])
def get_image_url(key: str, response: Response):
    """
    Resolve an object key (URL-encoded or not) to a short-lived viewing URL.
    """
    url = controller.resolve_image_url(key)
    response.headers["Cache-Control"] = f"private, max-age={IMAGE_URL_CACHE_SECONDS}"
    response.headers["Expires"] = formatdate(time.time() + IMAGE_URL_CACHE_SECONDS, usegmt=True)
    return Envelope(message="Image URL generated", data=ImageUrlData(url=url))
