from fastapi import Response

CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Authorization, Content-Type",
}


def preflight_response() -> Response:
    return Response(status_code=204, headers=CORS_PREFLIGHT_HEADERS)
