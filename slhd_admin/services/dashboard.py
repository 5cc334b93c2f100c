"""
Admin dashboard: statistics block and recent activity feed.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from slhd_admin.errors import storage_errors
from slhd_admin.models import User, Submission
from slhd_admin.services.aggregates import user_stats, dinas_by_region_type, submission_status_counts
from slhd_admin.services.cache import TTLCache
from slhd_admin.services.storage import storage_used_mb
from slhd_admin.services.timeline import build_timeline
from slhd_admin.settings import Settings

_cache = TTLCache()


def clear_cache() -> None:
    _cache.clear()


def _storage_usage(settings: Settings) -> float:
    return _cache.remember(
        "storage_size_dlh",
        settings.storage_cache_ttl_sec,
        lambda: storage_used_mb(settings.storage_path),
    )


def compute_stats(db: Session, year: int, settings: Settings) -> dict:
    users = user_stats(db)
    users["dinas_by_type"] = dinas_by_region_type(db)
    submissions = submission_status_counts(db, year)
    used_mb = _storage_usage(settings)
    return {
        "total_users_aktif": users["active"],
        "total_users_pending": users["pending_approval"],
        "year": year,
        "users": users,
        "submissions": submissions,
        "storage": {
            "used_mb": round(used_mb, 2),
            "used_gb": round(used_mb / 1024, 2),
        },
        "timeline_penilaian": build_timeline(db, year),
    }


def get_stats(db: Session, year: int, settings: Settings) -> dict:
    """Dashboard statistics for a year, served from cache for stats_cache_ttl_sec."""
    return _cache.remember(
        f"admin_dashboard_stats_{year}",
        settings.stats_cache_ttl_sec,
        lambda: compute_stats(db, year, settings),
    )


def recent_activities(db: Session, limit: int = 10) -> dict:
    with storage_errors("recent activities"):
        users = db.execute(
            select(User).options(selectinload(User.dinas))
            .order_by(User.created_at.desc()).limit(limit)
        ).scalars().all()
        subs = db.execute(
            select(Submission).options(selectinload(Submission.dinas))
            .order_by(Submission.created_at.desc()).limit(limit)
        ).scalars().all()

    items = []
    for u in users:
        items.append({
            "type": "user_registration",
            "user_id": u.id,
            "user_email": u.email,
            "user_role": u.role,
            "dinas_name": u.dinas.nama_dinas if u.dinas else None,
            "status": "approved" if u.is_active else "pending",
            "timestamp": u.created_at,
        })
    for s in subs:
        items.append({
            "type": "submission",
            "submission_id": s.id,
            "dinas_name": s.dinas.nama_dinas if s.dinas else None,
            "year": s.tahun,
            "status": s.status,
            "timestamp": s.created_at,
        })

    items.sort(key=lambda a: a["timestamp"], reverse=True)
    for a in items:
        a["timestamp"] = a["timestamp"].isoformat()
    # total counts the merged slice, not the table
    return {"activities": items[:limit], "total": len(items)}
