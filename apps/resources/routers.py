# resources/routers.py
from fastapi import APIRouter
from utils.response_wrapper import response_wrapper
from .views import upload_resource, get_resources, get_tags, download_resource, delete_resource

router = APIRouter()

router.post("/upload")(response_wrapper(upload_resource, 'Upload'))
router.get("/resources")(response_wrapper(get_resources, 'List resources'))
router.get("/tags")(response_wrapper(get_tags, 'List tags'))
router.get("/download/{resource_id}")(response_wrapper(download_resource, 'Download'))
router.delete("/resources/{resource_id}")(response_wrapper(delete_resource, 'Delete'))
