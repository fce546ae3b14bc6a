from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from community_hub.recruits.api.views import RecruitViewSet
from community_hub.seats.api.views import SeatViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("seats", SeatViewSet, basename="seats")
router.register("recruits", RecruitViewSet, basename="recruits")


app_name = "api"
urlpatterns = router.urls
