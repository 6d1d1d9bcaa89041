"""
Pagination for Order Tracking list endpoints.
"""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class OrdersPagination(PageNumberPagination):
    """
    Fixed 20 orders per page, with the page metadata the dashboard reads.

    A page number that is not a positive integer is read as page 1. A page
    past the last one is an empty page rather than a 404.
    """

    page_size = 20
    page_query_param = 'page'

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.paginator = self.django_paginator_class(queryset, self.get_page_size(request))
        self.page_number = self.get_page_number(request)

        if self.page_number > self.paginator.num_pages:
            return []
        self.page = self.paginator.page(self.page_number)
        return list(self.page)

    def get_page_number(self, request, paginator=None):
        try:
            number = int(request.query_params.get(self.page_query_param, 1))
        except (TypeError, ValueError):
            return 1
        return max(number, 1)

    def get_paginated_response(self, data):
        return Response({
            'orders': data,
            'currentPage': self.page_number,
            'totalPages': self.paginator.num_pages,
            'hasNextPage': self.page_number < self.paginator.num_pages,
            'count': self.paginator.count,
        })
