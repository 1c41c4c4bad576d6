from django.urls import path
from . import drafts, taxonomy, views

app_name = "blog"

urlpatterns = [
    path("posts", views.post_collection, name="post-list"),
    path("posts/featured", views.featured_posts, name="post-featured"),
    path("posts/top-viewed", views.top_viewed_post, name="post-top-viewed"),
    path("posts/bulk-delete", views.bulk_delete_posts, name="post-bulk-delete"),
    path("posts/admin/<int:pk>", views.post_admin_detail, name="post-admin-detail"),
    path("posts/<int:pk>/like", views.post_like, name="post-like"),
    path("posts/<str:slug>/adjacent", views.adjacent_posts, name="post-adjacent"),
    path("posts/<str:slug>/related", views.related_posts, name="post-related"),
    # GET by slug, PUT/DELETE by id
    path("posts/<str:key>", views.post_detail, name="post-detail"),
    path("likes/<int:pk>", views.post_like, name="like"),
    path("bookmarks", views.bookmark_list, name="bookmark-list"),
    path("bookmarks/<int:post_id>", views.bookmark_detail, name="bookmark-detail"),
    path("categories", taxonomy.category_collection, name="category-list"),
    path("categories/<str:slug>/posts", taxonomy.category_posts, name="category-posts"),
    path("categories/<str:key>", taxonomy.category_detail, name="category-detail"),
    path("tags", taxonomy.tag_collection, name="tag-list"),
    path("tags/<str:slug>/posts", taxonomy.tag_posts, name="tag-posts"),
    path("tags/<str:key>", taxonomy.tag_detail, name="tag-detail"),
    path("drafts", drafts.draft_collection, name="draft-list"),
    path("drafts/<int:pk>", drafts.draft_detail, name="draft-detail"),
    path("drafts/<int:pk>/publish", drafts.publish_draft, name="draft-publish"),
]
