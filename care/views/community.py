"""
Community board endpoints: public reading, patient authoring and
administrator moderation.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsAdminRole, IsPatientRole
from ..serializers.community import CommunityPostSerializer
from ..services.community import (
    admin_delete_post,
    create_post,
    delete_post,
    list_posts,
    update_post,
)


class _ReadOrPatientWrite(IsPatientRole):
    def has_permission(self, request, view):
        return request.method == 'GET' or super().has_permission(request, view)


@api_view(['GET', 'POST'])
@permission_classes([_ReadOrPatientWrite])
def community_posts(request):
    if request.method == 'GET':
        return Response(list_posts())
    s = CommunityPostSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(create_post(request.user, s.validated_data), status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsPatientRole])
def community_post_detail(request, post_id: int):
    if request.method == 'DELETE':
        delete_post(request.user, post_id)
        return Response({'message': 'Post deleted successfully'})
    s = CommunityPostSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    return Response(update_post(request.user, post_id, s.validated_data))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_community_posts(request):
    return Response(list_posts())


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_community_post_delete(request, post_id: int):
    admin_delete_post(request.user, post_id)
    return Response({'message': 'Post deleted successfully'})
