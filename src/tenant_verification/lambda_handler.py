import json
import logging

from pydantic import ValidationError

from tenant_verification.config import configure_logging, load_config
from tenant_verification.errors import ConfigError
from tenant_verification.models import TenantRecord
from tenant_verification.orchestrator import run_verification_sync

logger = logging.getLogger(__name__)


def _bad_request(message):
    return {"statusCode": 400, "body": json.dumps({"message": message})}


def lambda_handler(event, context):
    configure_logging()
    body = event.get("body") if isinstance(event, dict) else None
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            logger.warning("Rejected event: body is not JSON")
            return _bad_request("Request body must be a JSON object")
    if not isinstance(body, dict):
        return _bad_request("Request body must be a JSON object")

    try:
        record = TenantRecord(**body)
    except ValidationError as e:
        logger.warning("Rejected event: %s", e.errors()[0].get("msg"))
        return _bad_request(f"Invalid tenant record: {e.errors()[0].get('msg')}")

    try:
        config = load_config()
    except ConfigError as e:
        logger.error("Invalid verification configuration: %s", e)
        return {"statusCode": 500, "body": json.dumps({"message": f"Invalid configuration: {e}"})}

    report = run_verification_sync(record, config)
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": report.model_dump_json(),
    }
