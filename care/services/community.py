"""
Patient community board.

Posts are public to read; only patients write them and only the author
may edit or delete their own post.  Administrators can moderate.
"""
from __future__ import annotations

import logging

from care.exceptions import Forbidden, NotFound
from care.models import CommunityPost, User
from care.services.audit import log_action
from care.services.profiles import resolve_patient_id

logger = logging.getLogger(__name__)

ANONYMOUS_NAME = 'Anonymous'


def post_payload(p: CommunityPost) -> dict:
    return {
        'id': p.id,
        'patientId': p.patient_id,
        'title': p.title,
        'content': p.content,
        'flair': p.flair,
        'anonymous': p.anonymous,
        'patientName': ANONYMOUS_NAME if p.anonymous else p.patient.user.full_name,
        'createdAt': p.created_at.isoformat(),
        'updatedAt': p.updated_at.isoformat(),
    }


def list_posts() -> list[dict]:
    qs = CommunityPost.objects.select_related('patient__user').order_by('-created_at', '-id')
    return [post_payload(p) for p in qs]


def create_post(user: User, data: dict) -> dict:
    patient_id = resolve_patient_id(user)
    post = CommunityPost.objects.create(
        patient_id=patient_id,
        title=data['title'],
        content=data['content'],
        flair=data.get('flair') or 'General',
        anonymous=bool(data.get('anonymous')),
    )
    post = CommunityPost.objects.select_related('patient__user').get(pk=post.pk)
    return post_payload(post)


def _own_post(user: User, post_id: int) -> CommunityPost:
    post = CommunityPost.objects.select_related('patient__user').filter(pk=post_id).first()
    if post is None:
        raise NotFound('Post not found')
    if post.patient_id != resolve_patient_id(user):
        raise Forbidden('You can only modify your own posts')
    return post


def update_post(user: User, post_id: int, data: dict) -> dict:
    post = _own_post(user, post_id)
    for field in ('title', 'content', 'flair', 'anonymous'):
        if field in data:
            setattr(post, field, data[field])
    post.save()
    return post_payload(post)


def delete_post(user: User, post_id: int) -> None:
    _own_post(user, post_id).delete()


def admin_delete_post(user: User, post_id: int) -> None:
    post = CommunityPost.objects.filter(pk=post_id).first()
    if post is None:
        raise NotFound('Post not found')
    post.delete()
    log_action(user=user, action='community_post_delete', object_type='community_post', object_id=post_id)
    logger.info("community post %s removed by admin %s", post_id, user.id)
