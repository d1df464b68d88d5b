from datetime import datetime
from typing import Dict, Any, List, Optional

from sqlalchemy import func

from footprint import db
from footprint.models.emission import Emission
from footprint.models.user import User
from footprint.utils.emission_factors import estimate_emission


class EmissionService:

    @staticmethod
    def fetch_records(user_id: int, start_date: Optional[datetime] = None,
                      end_date: Optional[datetime] = None, category: Optional[str] = None,
                      limit: Optional[int] = None) -> List[Emission]:
        """User's records, newest first, with start_date <= timestamp < end_date."""
        query = Emission.query.filter(Emission.user_id == user_id)

        if start_date is not None:
            query = query.filter(Emission.timestamp >= start_date)
        if end_date is not None:
            query = query.filter(Emission.timestamp < end_date)
        if category:
            query = query.filter(Emission.category == category)

        query = query.order_by(Emission.timestamp.desc(), Emission.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def create_emission(user: User, data: Dict[str, Any]) -> Emission:
        """
        Store one validated record for `user`.

        When `value` is missing it is estimated from `amount` and the emission
        factor for the category/activity pair.
        """
        value = data.get('value')
        if value is None:
            value = estimate_emission(data.get('category'), data.get('activity'), data.get('amount'))
            if value is None:
                raise ValueError('No emission factor known for this activity; provide value')
        if value < 0:
            raise ValueError('Emission value cannot be negative')

        try:
            emission = Emission(
                user_id=user.id,
                user_name=user.display_name,
                category=data['category'],
                activity=data['activity'],
                value=float(value),
                timestamp=data.get('timestamp') or datetime.utcnow()
            )
            db.session.add(emission)
            db.session.commit()
            return emission
        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def delete_emission(emission_id: int, user_id: int) -> None:
        emission = Emission.query.get(emission_id)
        if not emission:
            raise ValueError('Emission not found')
        if emission.user_id != user_id:
            raise PermissionError("Cannot delete another user's emission")

        try:
            db.session.delete(emission)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def clear_emissions(user_id: int) -> int:
        try:
            deleted = Emission.query.filter_by(user_id=user_id).delete(synchronize_session=False)
            db.session.commit()
            return deleted
        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def get_category_summary(user_id: int) -> Dict[str, Any]:
        rows = db.session.query(
            Emission.category,
            func.sum(Emission.value).label('total_emissions'),
            func.count(Emission.id).label('count'),
            func.avg(Emission.value).label('avg_emission')
        ).filter(
            Emission.user_id == user_id
        ).group_by(
            Emission.category
        ).order_by(
            func.sum(Emission.value).desc()
        ).all()

        summary = [
            {
                'category': row.category,
                'total_emissions': float(row.total_emissions or 0),
                'count': row.count,
                'avg_emission': float(row.avg_emission or 0),
            }
            for row in rows
        ]
        return {
            'summary': summary,
            'total_emissions': sum(item['total_emissions'] for item in summary),
            'categories_tracked': len(summary),
        }

    @staticmethod
    def _user_totals_query():
        total = func.sum(Emission.value)
        return db.session.query(
            Emission.user_id,
            func.max(Emission.user_name).label('user_name'),
            total.label('total_emissions'),
            func.count(Emission.id).label('activity_count')
        ).group_by(Emission.user_id), total

    @staticmethod
    def get_user_totals() -> List[Dict[str, Any]]:
        """Every user's total, lowest first, rounded to 2 decimals."""
        query, total = EmissionService._user_totals_query()
        rows = query.order_by(total.asc()).all()
        return [EmissionService._total_row(row) for row in rows]

    @staticmethod
    def get_leaderboard(limit: int = 15) -> List[Dict[str, Any]]:
        """Users with a positive total, lowest emitters first."""
        query, total = EmissionService._user_totals_query()
        rows = query.having(total > 0).order_by(total.asc()).limit(limit).all()
        return [EmissionService._total_row(row) for row in rows]

    @staticmethod
    def _total_row(row) -> Dict[str, Any]:
        return {
            'user_id': row.user_id,
            'user_name': row.user_name or 'Unknown',
            'total_emissions': round(float(row.total_emissions or 0), 2),
            'activity_count': row.activity_count,
        }
