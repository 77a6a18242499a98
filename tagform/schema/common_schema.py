def api_response(status_code: int, message: str, data=None) -> dict:
    return {"statusCode": status_code, "message": message, "data": data}
