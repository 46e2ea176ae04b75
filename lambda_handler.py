"""
AWS Lambda handler for the Contract Engine API.

This is the production entry point for AWS Lambda deployments, and also hosts
the privileged user-provisioning function (POST /create_user).
For local development, use main.py (Flask app) instead.
"""

import base64
import json
import logging

from contract_engine import ContractProcessor
from contract_engine.config import Settings
from contract_engine.exceptions import ExternalFailure
from contract_engine.gateway import BackendClient
from contract_engine.provisioning import UserProvisioner

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

settings = Settings.from_env()

# Initialize processor (reused across warm invocations)
processor = ContractProcessor(settings)

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}

# POST routes served by the processor
CALCULATION_ROUTES = {
    "/contracts/prepare": processor.prepare_contract_from_dict,
    "/deadlines": processor.deadlines_from_dict,
    "/amendments/apply": processor.apply_amendment_from_dict,
    "/financial/entries/prepare": processor.prepare_entry_from_dict,
    "/processes/prepare": processor.prepare_process_from_dict,
    "/currency/parse": processor.parse_currency_from_dict,
    "/currency/format": processor.format_currency_from_dict,
}

PROVISIONING_ROUTES = ("/create_user", "/users")


def get_provisioner() -> UserProvisioner:
    """Provisioner backed by the service-role client."""
    if not settings.backend_configured:
        raise ExternalFailure("User provisioning backend is not configured")
    client = BackendClient(settings.backend_url, settings.backend_service_role_key, settings.backend_timeout)
    return UserProvisioner(client)


def _response(status_code, payload):
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(payload)}


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health, GET /api
    - POST calculation routes
    - POST /create_user
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    # Route to appropriate handler
    if path == "/health" and http_method == "GET":
        return handle_health()
    elif path == "/api" and http_method == "GET":
        return handle_api_info()
    elif path in CALCULATION_ROUTES and http_method == "POST":
        return handle_calculation(event, path)
    elif path in PROVISIONING_ROUTES and http_method == "POST":
        return handle_create_user(event)
    else:
        return _response(404, {"error": "Not found", "path": path})


def handle_health():
    """Health check endpoint."""
    return _response(200, {"status": "healthy", "environment": settings.environment})


def handle_api_info():
    """API information endpoint."""
    endpoints = {route: f"{route} [POST]" for route in CALCULATION_ROUTES}
    endpoints["create_user"] = "/create_user [POST]"
    endpoints["health"] = "/health [GET]"
    return _response(
        200,
        {
            "status": "ok",
            "message": "Contract Engine API",
            "version": "1.0",
            "environment": settings.environment,
            "runtime": "AWS Lambda",
            "endpoints": endpoints,
        },
    )


def _parse_body(event):
    """Decode the request body. Returns None for an empty body."""
    body = event.get("body", "")
    if isinstance(body, str):
        if not body:
            return None
        # Handle base64 encoded body (API Gateway)
        if event.get("isBase64Encoded"):
            body = base64.b64decode(body).decode("utf-8")
        return json.loads(body)
    return body


def handle_calculation(event, path):
    """Run one processor operation."""
    try:
        input_data = _parse_body(event)
        if not input_data:
            return _response(400, {"error": "No input data provided", "status": "failed"})

        logger.info(f"Processing {path}")
        result = CALCULATION_ROUTES[path](input_data)
        logger.info(f"Processed {path} successfully")

        return _response(200, result)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except (ValueError, KeyError, TypeError) as e:
        # Validation errors from engine (missing fields, invalid types, etc.)
        logger.error(f"Validation error: {str(e)}")
        return _response(400, {"error": f"Validation error: {str(e)}", "status": "validation_failed"})

    except ExternalFailure as e:
        logger.error(f"External failure: {e.message}")
        return _response(502, {"error": e.message, "status": "external_failure"})

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return _response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})


def handle_create_user(event):
    """
    Create an auth identity and its profile.

    Every failure answers 400 with the message as-is, so the operator sees
    the backend's own wording.
    """
    try:
        input_data = _parse_body(event)
        if not input_data:
            return _response(400, {"error": "No input data provided"})

        logger.info(f"Provisioning user: {input_data.get('username', 'Unknown')}")
        result = get_provisioner().provision_from_dict(input_data)
        return _response(200, result)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _response(400, {"error": f"Invalid JSON: {str(e)}"})

    except (ValueError, ExternalFailure) as e:
        logger.error(f"User provisioning failed: {str(e)}")
        return _response(400, {"error": str(e)})

    except Exception as e:
        logger.error(f"Unexpected provisioning error: {str(e)}", exc_info=True)
        return _response(500, {"error": "An unexpected error occurred during provisioning"})
