from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Recruit(models.Model):
    """A team-recruiting post: capacity-bounded members plus an applicant queue."""

    class Category(models.TextChoices):
        CTF = "ctf", _("CTF")
        PROJECT = "project", _("Project")
        STUDY = "study", _("Study")

    class Status(models.TextChoices):
        OPEN = "open", _("Open")
        CLOSED = "closed", _("Closed")

    title = models.CharField(max_length=200)
    content = models.TextField()
    category = models.CharField(max_length=20, choices=Category.choices)
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="authored_recruits",
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL, related_name="joined_recruits", blank=True
    )
    pending_members = models.ManyToManyField(
        settings.AUTH_USER_MODEL, related_name="pending_recruits", blank=True
    )
    max_members = models.PositiveIntegerField(
        validators=[MinValueValidator(1)], help_text=_("Capacity, author included")
    )
    current_members = models.PositiveIntegerField(default=1)
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.OPEN, db_index=True
    )
    deadline = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    @property
    def is_full(self) -> bool:
        return self.current_members >= self.max_members

    @property
    def room_name(self) -> str:
        return f"recruit_{self.pk}"


class ChatMessage(models.Model):
    recruit = models.ForeignKey(
        Recruit, on_delete=models.CASCADE, related_name="chat_messages"
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_messages",
    )
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.author} @ {self.recruit_id}: {self.content[:30]}"
