from django.contrib.syndication.views import Feed
from django.utils.feedgenerator import Rss201rev2Feed

from blog.models import Post

FEED_SIZE = 20


class LatestPostsFeed(Feed):
    feed_type = Rss201rev2Feed
    title = "Blog"
    link = "/"
    description = "Latest posts"

    def items(self):
        return (
            Post.objects.filter(status=Post.Status.PUBLIC)
            .select_related("author", "category")
            .order_by("-published_at", "-id")[:FEED_SIZE]
        )

    def item_title(self, item):
        return item.title

    def item_description(self, item):
        return item.excerpt

    def item_link(self, item):
        return f"/posts/{item.slug}"

    def item_pubdate(self, item):
        return item.published_at

    def item_updateddate(self, item):
        return item.updated_at

    def item_author_name(self, item):
        return item.author.name

    def item_categories(self, item):
        return [item.category.name]
