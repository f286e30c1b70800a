from booking_core import __version__
from booking_core.apigw import method, response
from booking_core.logger import get_logger

logger = get_logger("health")


def lambda_handler(event, context):
    logger.info("health.check", extra={"path": "/health", "method": method(event)})
    return response(200, {"status": "ok", "version": __version__})
