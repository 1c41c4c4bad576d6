from django.contrib.sitemaps import Sitemap

from blog.models import Category, Post, Tag
from pages.models import Page


class PostSitemap(Sitemap):
    changefreq = "weekly"
    priority = 0.8

    def items(self):
        return Post.objects.filter(status=Post.Status.PUBLIC).order_by("-published_at", "-id")

    def location(self, item):
        return f"/posts/{item.slug}"

    def lastmod(self, item):
        return item.updated_at


class CategorySitemap(Sitemap):
    changefreq = "weekly"
    priority = 0.5

    def items(self):
        return Category.objects.order_by("name")

    def location(self, item):
        return f"/categories/{item.slug}"


class TagSitemap(Sitemap):
    changefreq = "weekly"
    priority = 0.4

    def items(self):
        return Tag.objects.order_by("name")

    def location(self, item):
        return f"/tags/{item.slug}"


class PageSitemap(Sitemap):
    changefreq = "monthly"
    priority = 0.6

    def items(self):
        return Page.objects.filter(status=Page.Status.PUBLISHED).order_by("-published_at", "-id")

    def location(self, item):
        return f"/pages/{item.slug}"

    def lastmod(self, item):
        return item.updated_at


sitemaps = {
    "posts": PostSitemap,
    "categories": CategorySitemap,
    "tags": TagSitemap,
    "pages": PageSitemap,
}
