"""
Rating endpoints: patients rate doctors, everyone reads the ratings
relevant to their role.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import InvalidRating
from ..serializers.rating import RatingCreateSerializer
from ..services.ratings import list_ratings, submit_rating


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def ratings(request):
    if request.method == 'GET':
        return Response(list_ratings(request.user))

    s = RatingCreateSerializer(data=request.data)
    if not s.is_valid():
        raise InvalidRating()
    vd = s.validated_data
    created = submit_rating(
        request.user,
        doctor_id=vd['doctorId'],
        rating=vd['rating'],
        review=vd.get('review') or '',
        appointment_id=vd.get('appointmentId'),
    )
    return Response(created, status=status.HTTP_201_CREATED)
