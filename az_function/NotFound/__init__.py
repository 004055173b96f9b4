import azure.functions as func
from ..shared.http_api import handle_request

async def main(req: func.HttpRequest) -> func.HttpResponse:
    """Catch-all route: answers CORS preflight and reports every other path as not found."""
    return await handle_request(req)
