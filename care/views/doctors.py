from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from care.exceptions import InvalidInput
from care.services.doctors import list_doctors


def _pagination(request):
    try:
        page = int(request.query_params.get('page')) if request.query_params.get('page') else None
        page_size = int(request.query_params.get('pageSize')) if request.query_params.get('pageSize') else None
    except ValueError:
        raise InvalidInput('Invalid pagination parameters')
    if (page is not None and page < 1) or (page_size is not None and page_size < 1):
        raise InvalidInput('Invalid pagination parameters')
    return page, page_size


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def active_doctors(request):
    """Return active doctors with their average rating.
    Query params:
      - q: optional search (name/specialization contains)
      - page, pageSize: pagination (optional)
    """
    q = (request.query_params.get('q') or '').strip() or None
    page, page_size = _pagination(request)
    doctors, _total = list_doctors(q=q, page=page, page_size=page_size)
    return Response(doctors)


@api_view(['GET'])
@permission_classes([AllowAny])
def search_doctors(request):
    """Public doctor search; ``query`` is required."""
    q = (request.query_params.get('query') or '').strip()
    if not q:
        raise InvalidInput('Search query is required')
    page, page_size = _pagination(request)
    doctors, _total = list_doctors(q=q, page=page, page_size=page_size)
    return Response(doctors)
