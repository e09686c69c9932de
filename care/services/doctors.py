from typing import Optional
from django.db.models import Q
from care.models import DoctorProfile
from care.services.ratings import with_rating_summary


def _row(d: DoctorProfile) -> dict:
    avg = getattr(d, 'avg_rating', None)
    return {
        'doctorId': d.id,
        'userId': d.user_id,
        'firstName': d.user.first_name,
        'lastName': d.user.last_name,
        'email': d.user.email,
        'phone': d.user.phone,
        'specialization': d.specialization,
        'hospital': d.hospital,
        'experience': d.experience,
        'averageRating': round(float(avg), 2) if avg is not None else None,
        'ratingCount': getattr(d, 'rating_count', 0),
    }


def list_doctors(*, q: Optional[str]=None, page: Optional[int]=None,
                 page_size: Optional[int]=None) -> tuple[list[dict], int]:
    """Active doctors with their rating average, optionally filtered by name or specialization."""
    qs = DoctorProfile.objects.select_related('user').filter(status=DoctorProfile.STATUS_ACTIVE)
    if q:
        qs = qs.filter(
            Q(user__first_name__icontains=q) | Q(user__last_name__icontains=q) | Q(specialization__icontains=q)
        )
    qs = with_rating_summary(qs).order_by('user__first_name', 'user__last_name', 'id')

    total = qs.count()
    if page and page_size:
        start = (page-1)*page_size
        end = start + page_size
        qs = qs[start:end]

    return [_row(d) for d in qs], total
