import os
from prometheus_client import Counter, start_http_server
import logging

logger = logging.getLogger(__name__)

METRICS_PORT = int(os.getenv('METRICS_PORT', '8001'))

PREVIEWS_ISSUED = Counter('igpreview_previews_issued_total', 'Preview links issued')
PREVIEW_REJECTIONS = Counter('igpreview_preview_rejections_total', 'Preview tokens rejected at read time', ['reason'])
SIGNING_FAILURES = Counter('igpreview_signing_failures_total', 'Photos dropped because a signed URL could not be issued')

def init_metrics(port: int = METRICS_PORT):
    """Initialize Prometheus metrics server"""
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server started on port {port}")
    except Exception as e:
        logger.warning(f'Prometheus start failed: {e}')
