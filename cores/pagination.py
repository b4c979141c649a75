from django.conf import settings
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


def _positive_int(raw, default):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


class PageLimitPagination(BasePagination):
    """
    ?page=1&limit=10 (1-indexed). Responds with { "items": [...], "total": n }.
    A page past the end yields an empty item list rather than a 404.
    """
    page_query_param = 'page'
    limit_query_param = 'limit'
    max_limit = 100

    def paginate_queryset(self, queryset, request, view=None):
        default_limit = settings.REST_FRAMEWORK.get('PAGE_SIZE') or 10
        self.page = _positive_int(request.query_params.get(self.page_query_param), 1)
        self.limit = min(_positive_int(request.query_params.get(self.limit_query_param), default_limit), self.max_limit)
        self.total = queryset.count()

        offset = (self.page - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data):
        return Response({"items": data, "total": self.total})

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'items': schema,
                'total': {'type': 'integer'},
            },
        }
