"""
Magazine service routes: published issues and their articles.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from stratford_api.common.responses import attach_request_logging, failure, success
from stratford_api.database.db_connection import get_db
from stratford_api.database.models import Article, MagazineIssue

logger = logging.getLogger(__name__)

magazine_bp = Blueprint("magazine", __name__)
attach_request_logging(magazine_bp, "Magazine")


@magazine_bp.route("/issues", methods=["GET"])
def list_issues() -> Tuple[Response, int]:
    """
    Published issues, newest first, each with its article count.
    """
    article_count = (
        select(func.count(Article.id))
        .where(Article.issue_id == MagazineIssue.id)
        .correlate(MagazineIssue)
        .scalar_subquery()
    )

    try:
        with get_db() as session:
            rows = session.execute(
                select(MagazineIssue, article_count)
                .where(MagazineIssue.status == "PUBLISHED")
                .order_by(MagazineIssue.published_at.desc())
            ).all()
            issues = []
            for issue, count in rows:
                data = issue.to_dict()
                data["_count"] = {"articles": count}
                issues.append(data)
    except SQLAlchemyError:
        logger.exception("Get magazine issues error")
        return failure("Failed to get magazine issues", 500)

    return success({"issues": issues})


@magazine_bp.route("/issues/<issue_id>", methods=["GET"])
def get_issue(issue_id: str) -> Tuple[Response, int]:
    """
    A single issue with its published articles, oldest first.

    Returns:
        200: { issue }
        404: Issue not found.
    """
    try:
        with get_db() as session:
            issue = session.get(MagazineIssue, issue_id)
            if not issue:
                return failure("Magazine issue not found", 404)

            articles = session.scalars(
                select(Article)
                .options(joinedload(Article.author))
                .where(Article.issue_id == issue.id, Article.status == "PUBLISHED")
                .order_by(Article.published_at)
            ).all()

            data = issue.to_dict()
            data["articles"] = [a.to_dict() for a in articles]
    except SQLAlchemyError:
        logger.exception("Get magazine issue error")
        return failure("Failed to get magazine issue", 500)

    return success({"issue": data})
