from django.contrib import admin

from community_hub.recruits import models


class ChatMessageInline(admin.TabularInline):
    model = models.ChatMessage
    extra = 0
    readonly_fields = ["author", "content", "created_at"]


@admin.register(models.Recruit)
class RecruitAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "title",
        "category",
        "author",
        "current_members",
        "max_members",
        "status",
    ]
    search_fields = ["title", "author__username"]
    list_filter = ["category", "status"]
    filter_horizontal = ["members", "pending_members"]
    inlines = [ChatMessageInline]
