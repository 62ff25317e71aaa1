"""Read-only article listings.

Public listings only ever return published articles and never touch the view
counter. Every queryset ends with ``-id`` so ties have a fixed order.
"""

from django.db.models import Q

from access_control.policy import ensure_can_read
from core.clock import system_clock, window_start
from core.errors import NotFoundError
from core.pagination import Page, PageRequest, bounded_limit, paginate
from .models import Article, ArticleTag

NEWEST_FIRST = ("-publish_date", "-id")
MOST_VIEWED = ("-views", "-publish_date", "-id")


def _search_filter(term: str) -> Q:
    return Q(title__icontains=term) | Q(content__icontains=term) | Q(excerpt__icontains=term)


class ArticleQueries:
    """Filtered, ordered, bounded article reads."""

    def __init__(self, clock=None):
        self.clock = clock or system_clock

    @staticmethod
    def _published():
        return Article.objects.filter(published=True).select_related("owner").prefetch_related("tag_entries")

    def list_published(
        self,
        page: PageRequest,
        search: str | None = None,
        category: str | None = None,
        featured: bool | None = None,
        tags: list[str] | None = None,
    ) -> Page:
        """Published articles narrowed by any combination of filters."""
        queryset = self._published()
        if search and search.strip():
            queryset = queryset.filter(_search_filter(search.strip()))
        if category:
            queryset = queryset.filter(category=category)
        if featured is not None:
            queryset = queryset.filter(featured=featured)
        if tags:
            queryset = queryset.filter(tag_entries__tag__in=tags).distinct()
        return paginate(queryset.order_by(*NEWEST_FIRST), page)

    def by_category(self, category: str, page: PageRequest) -> Page:
        return paginate(self._published().filter(category=category).order_by(*NEWEST_FIRST), page)

    def search(self, term: str, page: PageRequest) -> Page:
        """Case-insensitive substring match across title, content and excerpt."""
        queryset = self._published()
        term = (term or "").strip()
        if term:
            queryset = queryset.filter(_search_filter(term))
        return paginate(queryset.order_by(*NEWEST_FIRST), page)

    def by_tags(self, tags: list[str], page: PageRequest) -> Page:
        """Articles carrying at least one of ``tags``."""
        queryset = self._published().filter(tag_entries__tag__in=tags).distinct()
        return paginate(queryset.order_by(*NEWEST_FIRST), page)

    def most_viewed(self, page: PageRequest) -> Page:
        return paginate(self._published().order_by(*MOST_VIEWED), page)

    def recent(self, days: int = 7, limit: int = 10) -> list[Article]:
        since = window_start(self.clock, days)
        queryset = self._published().filter(publish_date__gte=since).order_by(*NEWEST_FIRST)
        return list(queryset[: bounded_limit(limit)])

    def featured(self, limit: int = 6) -> list[Article]:
        queryset = self._published().filter(featured=True).order_by(*NEWEST_FIRST)
        return list(queryset[: bounded_limit(limit)])

    def by_author(self, author_id, page: PageRequest) -> Page:
        return paginate(self._published().filter(owner_id=author_id).order_by(*NEWEST_FIRST), page)

    def related(self, article_id, principal=None, limit: int = 5) -> list[Article]:
        """Published articles sharing the category or a tag, excluding the source.

        The source itself must be readable by ``principal``, so a draft only
        yields suggestions for its owner or an admin.
        """
        try:
            source = Article.objects.prefetch_related("tag_entries").get(pk=article_id)
        except (Article.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Article not found with id: {article_id}")
        ensure_can_read(principal, source)

        match = Q()
        if source.category:
            match |= Q(category=source.category)
        if source.tags:
            match |= Q(tag_entries__tag__in=source.tags)
        if not match:
            return []

        queryset = (
            self._published()
            .filter(match)
            .exclude(pk=source.pk)
            .distinct()
            .order_by(*NEWEST_FIRST)
        )
        return list(queryset[: bounded_limit(limit)])

    @staticmethod
    def for_owner(principal, page: PageRequest) -> Page:
        """The principal's own articles, drafts included, newest first."""
        queryset = (
            Article.objects.filter(owner_id=principal.id)
            .select_related("owner")
            .prefetch_related("tag_entries")
            .order_by("-created_at", "-id")
        )
        return paginate(queryset, page)

    @staticmethod
    def categories() -> list[str]:
        return list(
            Article.objects.filter(published=True)
            .exclude(category__isnull=True)
            .exclude(category="")
            .order_by("category")
            .values_list("category", flat=True)
            .distinct()
        )

    @staticmethod
    def tags() -> list[str]:
        return list(
            ArticleTag.objects.filter(article__published=True)
            .order_by("tag")
            .values_list("tag", flat=True)
            .distinct()
        )


__all__ = ["ArticleQueries"]
