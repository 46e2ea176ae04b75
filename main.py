from flask import Flask, request, jsonify
from flask_cors import CORS
from contract_engine import ContractProcessor
from contract_engine.auth import AuthService
from contract_engine.config import Settings
from contract_engine.exceptions import AuthenticationFailed, ExternalFailure
from contract_engine.gateway import BackendClient
from contract_engine.provisioning import UserProvisioner
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = Settings.from_env()

app = Flask(__name__)

# Enable CORS for all routes (the browser app calls the API directly)
CORS(app)

# Initialize the contract processor
processor = ContractProcessor(settings)


def get_provisioner() -> UserProvisioner:
    if not settings.backend_configured:
        raise ExternalFailure("User provisioning backend is not configured")
    client = BackendClient(settings.backend_url, settings.backend_service_role_key, settings.backend_timeout)
    return UserProvisioner(client)


def get_auth_service() -> AuthService:
    if not settings.backend_url:
        raise ExternalFailure("Authentication backend is not configured")
    client = BackendClient(settings.backend_url, settings.backend_anon_key, settings.backend_timeout)
    return AuthService(client, settings.login_domain)


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Contract Engine API",
        "version": "1.0",
        "endpoints": {
            "prepare_contract": "/contracts/prepare [POST]",
            "deadlines": "/deadlines [POST]",
            "apply_amendment": "/amendments/apply [POST]",
            "prepare_entry": "/financial/entries/prepare [POST]",
            "prepare_process": "/processes/prepare [POST]",
            "parse_currency": "/currency/parse [POST]",
            "format_currency": "/currency/format [POST]",
            "create_user": "/users [POST]",
            "login": "/auth/login [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


def _run(operation, name):
    """Run a processor operation against the JSON body."""
    try:
        input_data = request.get_json(force=True, silent=True)

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        logger.info(f"Processing {name}")
        result = operation(input_data)
        logger.info(f"Processed {name} successfully")

        return jsonify(result), 200

    except ValueError as e:
        # Validation errors from engine
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "validation_failed"
        }), 400

    except AuthenticationFailed as e:
        logger.error("Sign-in rejected: bad credentials")
        return jsonify({
            "error": e.message,
            "status": "unauthorized"
        }), 401

    except ExternalFailure as e:
        logger.error(f"External failure: {e.message}")
        return jsonify({
            "error": e.message,
            "status": "external_failure"
        }), 502

    except Exception as e:
        # Unexpected errors
        logger.error(f"Processing error: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "failed"
        }), 500


@app.route("/contracts/prepare", methods=["POST"])
def prepare_contract():
    """Fill suggested dates, derive the annual value and snapshot a contract form"""
    return _run(processor.prepare_contract_from_dict, "contract")


@app.route("/deadlines", methods=["POST"])
def deadlines():
    """Default-term suggestion or renewal-window report"""
    return _run(processor.deadlines_from_dict, "deadlines")


@app.route("/amendments/apply", methods=["POST"])
def apply_amendment():
    """Apply an amendment to a contract's running totals"""
    return _run(processor.apply_amendment_from_dict, "amendment")


@app.route("/financial/entries/prepare", methods=["POST"])
def prepare_entry():
    """Compute gross/net values and the payload of a financial entry"""
    return _run(processor.prepare_entry_from_dict, "financial entry")


@app.route("/processes/prepare", methods=["POST"])
def prepare_process():
    return _run(processor.prepare_process_from_dict, "monthly process")


@app.route("/currency/parse", methods=["POST"])
def parse_currency():
    return _run(processor.parse_currency_from_dict, "currency parse")


@app.route("/currency/format", methods=["POST"])
def format_currency():
    return _run(processor.format_currency_from_dict, "currency format")


@app.route("/users", methods=["POST"])
def create_user():
    """Create an auth identity and its profile (service-role backend)"""
    return _run(lambda data: get_provisioner().provision_from_dict(data), "user provisioning")


@app.route("/auth/login", methods=["POST"])
def login():
    """Sign in with a username or e-mail"""
    return _run(
        lambda data: get_auth_service().sign_in(data.get("username", ""), data.get("password", "")),
        "login"
    )


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=settings.port, debug=False)
