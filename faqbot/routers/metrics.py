from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response

router = APIRouter()

REQUESTS = Counter(
    "faq_requests_total", "Answered questions", ["route", "lang"]
)
ERRORS = Counter("faq_errors_total", "Total errors", ("code",))
LATENCY = Histogram(
    "faq_request_latency_ms",
    "Request latency (ms)",
    buckets=[5,10,25,50,100,250,500,1000,2500],
)
EMB_LAT = Histogram(
    "faq_embed_latency_ms",
    "Query embedding latency (ms)"
)

@router.get("")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
