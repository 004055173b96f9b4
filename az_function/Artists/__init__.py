import azure.functions as func
from ..shared.http_api import handle_request

async def main(req: func.HttpRequest) -> func.HttpResponse:
    return await handle_request(req)
