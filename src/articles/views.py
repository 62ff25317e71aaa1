"""Article endpoints: lifecycle operations and public listings."""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from access_control.permissions import CapabilityPermission
from access_control.policy import Capability
from core.errors import ValidationFailedError
from core.pagination import PageRequest
from core.params import bool_param, int_param, list_param
from core.response import BaseViewSet, api_response, page_response
from .queries import ArticleQueries
from .serializers import ArticleSerializer, ArticleWriteSerializer
from .services import ArticleService


def _many(articles) -> list:
    return ArticleSerializer(articles, many=True).data


class ArticleViewSet(BaseViewSet):
    """Articles: public reads of published content, owner/admin writes."""

    permission_classes = [CapabilityPermission]
    lookup_value_regex = r"\d+"
    required_capabilities = {
        "create": Capability.CREATE_CONTENT,
        "update": Capability.CREATE_CONTENT,
        "partial_update": Capability.CREATE_CONTENT,
        "destroy": Capability.CREATE_CONTENT,
        "publish": Capability.CREATE_CONTENT,
        "my_articles": Capability.CREATE_CONTENT,
        "statistics": Capability.ADMIN,
        "*": None,
    }

    service_class = ArticleService
    queries_class = ArticleQueries

    @property
    def service(self) -> ArticleService:
        return self.service_class()

    @property
    def queries(self) -> ArticleQueries:
        return self.queries_class()

    def _write_fields(self, request) -> dict:
        serializer = ArticleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return dict(serializer.validated_data)

    # Lifecycle

    def list(self, request):
        """Published articles with optional search/category/featured/tags filters."""
        page = self.queries.list_published(
            PageRequest.from_params(request.query_params),
            search=request.query_params.get("search"),
            category=request.query_params.get("category") or None,
            featured=bool_param(request, "featured"),
            tags=list_param(request, "tags"),
        )
        return page_response(page, ArticleSerializer)

    def create(self, request):
        article = self.service.create(request.user, self._write_fields(request))
        return api_response(ArticleSerializer(article).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        """Return one article; drafts only to their owner or an admin."""
        article = self.service.read(pk, request.user)
        return api_response(ArticleSerializer(article).data)

    def update(self, request, pk=None):
        article = self.service.update(pk, request.user, self._write_fields(request))
        return api_response(ArticleSerializer(article).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        self.service.delete(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"])
    def publish(self, request, pk=None):
        article = self.service.publish(pk, request.user)
        return api_response(ArticleSerializer(article).data)

    @action(detail=False, methods=["get"])
    def statistics(self, request):
        return api_response(self.service.statistics())

    # Listings

    @action(detail=True, methods=["get"])
    def related(self, request, pk=None):
        related = self.queries.related(pk, request.user, limit=int_param(request, "limit", 5))
        return api_response(_many(related))

    @action(detail=False, methods=["get"])
    def featured(self, request):
        return api_response(_many(self.queries.featured(limit=int_param(request, "limit", 6))))

    @action(detail=False, methods=["get"])
    def categories(self, request):
        return api_response(self.queries.categories())

    @action(detail=False, methods=["get"])
    def tags(self, request):
        return api_response(self.queries.tags())

    @action(detail=False, methods=["get"], url_path=r"category/(?P<category>[^/]+)")
    def category(self, request, category=None):
        page = self.queries.by_category(category, PageRequest.from_params(request.query_params))
        return page_response(page, ArticleSerializer)

    @action(detail=False, methods=["get"], url_path="tag")
    def by_tags(self, request):
        tags = list_param(request, "tags")
        if not tags:
            raise ValidationFailedError({"tags": "At least one tag is required."})
        page = self.queries.by_tags(tags, PageRequest.from_params(request.query_params))
        return page_response(page, ArticleSerializer)

    @action(detail=False, methods=["get"])
    def search(self, request):
        term = request.query_params.get("q", "")
        page = self.queries.search(term, PageRequest.from_params(request.query_params))
        return page_response(page, ArticleSerializer)

    @action(detail=False, methods=["get"], url_path="most-viewed")
    def most_viewed(self, request):
        page = self.queries.most_viewed(PageRequest.from_params(request.query_params))
        return page_response(page, ArticleSerializer)

    @action(detail=False, methods=["get"])
    def recent(self, request):
        articles = self.queries.recent(
            days=int_param(request, "days", 7),
            limit=int_param(request, "limit", 10),
        )
        return api_response(_many(articles))

    @action(detail=False, methods=["get"], url_path=r"author/(?P<author_id>\d+)")
    def author(self, request, author_id=None):
        page = self.queries.by_author(int(author_id), PageRequest.from_params(request.query_params))
        return page_response(page, ArticleSerializer)

    @action(detail=False, methods=["get"], url_path="my-articles")
    def my_articles(self, request):
        page = self.queries.for_owner(request.user, PageRequest.from_params(request.query_params))
        return page_response(page, ArticleSerializer)


__all__ = ["ArticleViewSet"]
