"""
Review ingestion API Routes

Provides endpoints for:
- Ingesting one chronicle by link
- Ingesting every chronicle listed on the site (sequential, throttled)
- Listing stored links and reading a stored review

Errors propagate to the global handlers, which answer INTERNAL_ERROR.
"""
import time
import logging
from flask import Blueprint, request, jsonify, abort

from api.params import FetchReviewParams, FetchReviewsParams
from services.ingestion import get_ingestion

logger = logging.getLogger(__name__)

reviews_bp = Blueprint('reviews', __name__)


def _payload():
    """JSON body, falling back to query params."""
    return request.get_json(silent=True) or request.args.to_dict()


@reviews_bp.route("/fetch", methods=["POST"])
def fetch_review():
    """
    Fetch one chronicle and upsert it.

    Body:
        - link: Chronicle URL (required)
        - ignore_cache: Render the page live (default false)

    Returns:
        {"data": [outcome]} where outcome is INSERTED or UPDATED
    """
    start = time.time()
    params = FetchReviewParams(**_payload())

    outcome = get_ingestion().orchestrator.fetch_and_upsert_review(
        params.link, ignore_cache=params.ignore_cache
    )

    logger.info(f"POST /api/reviews/fetch took {time.time() - start:.2f}s")
    return jsonify({"data": [outcome.to_dict()]})


@reviews_bp.route("/fetch-all", methods=["POST"])
def fetch_reviews():
    """
    Fetch every new chronicle (or all of them with update=true).

    Body:
        - delay: Seconds between two chronicles (default 0)
        - max_count: Stop after this many chronicles (optional)
        - update: Reprocess chronicles already stored (default false)
        - ignore_cache: Render every page live (default false)

    Returns:
        {"count": n, "data": [outcome, ...]} in processing order
    """
    start = time.time()
    params = FetchReviewsParams(**_payload())

    outcomes = get_ingestion().orchestrator.fetch_and_upsert_reviews(
        delay=params.delay,
        max_count=params.max_count,
        update=params.update,
        ignore_cache=params.ignore_cache,
        triggered_by="api",
    )

    logger.info(
        f"POST /api/reviews/fetch-all took {time.time() - start:.2f}s "
        f"({len(outcomes)} chronicles)"
    )
    return jsonify({
        "count": len(outcomes),
        "data": [o.to_dict() for o in outcomes],
    })


@reviews_bp.route("/links", methods=["GET"])
def list_links():
    links = get_ingestion().store.list_links()
    return jsonify({"count": len(links), "data": links})


@reviews_bp.route("/runs", methods=["GET"])
def list_runs():
    """Most recent batch runs, newest first."""
    limit = request.args.get("limit", 20, type=int)
    runs = get_ingestion().orchestrator.get_recent_runs(limit=limit)
    return jsonify({"count": len(runs), "data": [r.to_dict() for r in runs]})


@reviews_bp.route("/<int:review_id>", methods=["GET"])
def get_review(review_id):
    review = get_ingestion().store.get(review_id)
    if review is None:
        abort(404, description=f"Review {review_id} not found")
    return jsonify({"data": review.to_dict()})
