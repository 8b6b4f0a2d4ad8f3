from fastapi import FastAPI, Request
from .routes import router
from .routes.pages import router as pages_router
from .core import init_metrics
import logging
from pythonjsonlogger import jsonlogger

# setup structured logging
logger = logging.getLogger('igpreview')
handler = logging.StreamHandler()
formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(logging.INFO)

app = FastAPI(title="IG Preview", version="0.1.0")

app.include_router(router, prefix="/api")
app.include_router(pages_router)

@app.get('/healthz')
async def healthz():
    return {'status': 'ok'}

@app.middleware('http')
async def log_requests(request: Request, call_next):
    path = request.url.path
    if path.startswith('/preview/'):
        # preview tokens are credentials
        path = '/preview/<token>'
    logger.info({'msg': 'request_start', 'method': request.method, 'path': path})
    response = await call_next(request)
    logger.info({'msg': 'request_end', 'status': response.status_code})
    return response

@app.on_event("startup")
async def startup():
    # Best-effort init, don't block app from starting if a dependency fails
    try:
        init_metrics()
    except Exception as e:
        logger.warning({'msg': 'metrics_init_failed', 'error': str(e)})
