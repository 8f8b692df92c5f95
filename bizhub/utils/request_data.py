"""Helpers for reading request bodies."""
from flask import request


def request_payload() -> dict:
    """JSON body if present, form fields otherwise."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()
