import asyncio
import logging

from aiohttp import web

from portal.parser import ResultParser
from services.demo_service import get_demo_result
from services.grade_service import GradeService

routes = web.RouteTableDef()
logger = logging.getLogger(__name__)

REQUIRED_LOGIN_FIELDS = ("enrollmentNo", "password", "captcha", "sessionId")


def error_response(message: str, status: int = 200) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


@routes.get("/")
@routes.get("/health")
async def health_check(request: web.Request):
    return web.Response(text="OK", status=200)


@routes.get("/api/captcha")
async def get_captcha(request: web.Request):
    store = request.app["sessions"]
    session_id, client = store.open(request.query.get("sessionId") or None)

    captcha = await asyncio.to_thread(client.get_captcha)
    if not captcha:
        return error_response("Failed to fetch captcha", status=500)

    return web.json_response({
        "success": True,
        "sessionId": session_id,
        "captcha": captcha
    })


@routes.post("/api/login")
async def login(request: web.Request):
    if request.content_type == "application/json":
        try:
            data = await request.json()
        except ValueError:
            return error_response("Invalid JSON body", status=400)
    else:
        data = await request.post()

    if not hasattr(data, "get") or not all(data.get(field) for field in REQUIRED_LOGIN_FIELDS):
        return error_response("Missing required fields", status=400)

    client = request.app["sessions"].get(data["sessionId"])
    if client is None:
        return error_response("Session expired, please reload the captcha", status=400)

    try:
        status = await asyncio.to_thread(client.login, data["enrollmentNo"], data["password"], data["captcha"])
        if status == "BAD_CREDENTIALS":
            return error_response("Invalid credentials or captcha")
        if status == "PORTAL_DOWN":
            return error_response("Exam portal is unavailable, please try again later", status=502)

        html = await asyncio.to_thread(client.get_result_html)
        if html is None:
            return error_response("Exam portal is unavailable, please try again later", status=502)

        parsed = await asyncio.to_thread(ResultParser.extract, html)
        if not parsed.semesters:
            logger.warning(f"No semesters found in result page for {data['enrollmentNo']}")
            return error_response("Could not fetch result data")

        graded = GradeService.grade(parsed, request.app["credits"])
        return web.json_response({"success": True, "data": graded.to_dict()})
    except Exception as e:
        logger.exception(f"Login error for {data['enrollmentNo']}: {e}")
        return error_response(f"Login failed: {e}", status=500)


@routes.get("/api/demo")
async def demo(request: web.Request):
    graded = GradeService.grade(get_demo_result(), request.app["credits"])
    return web.json_response({"success": True, "data": graded.to_dict()})
