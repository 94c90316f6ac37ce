# countries/views.py
import logging

from django.http import FileResponse
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics, status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from . import services
from .exceptions import ExternalServiceError, SnapshotNotFound
from .filters import CountryFilter, SortOrderingFilter
from .models import Country
from .serializers import CountrySerializer, RefreshResultSerializer, RefreshStatusSerializer
from .snapshot import get_summary_image_path

# Get a logger instance specific to this app
logger = logging.getLogger('countries')


# --- Main Refresh Endpoint ---

@swagger_auto_schema(method='post', responses={200: RefreshResultSerializer})
@api_view(['POST'])
def refresh_countries_view(request):
    """
    Handles the POST /countries/refresh request.
    Runs a full refresh cycle and maps its failures to HTTP status codes.
    """
    logger.info(f"Received request to {request.path} from {request.META.get('REMOTE_ADDR')}")
    try:
        result = services.refresh_country_data()
    except ExternalServiceError as e:
        logger.error(f"External service error during refresh: {e}", exc_info=True)
        return Response(
            {"error": "External data source unavailable", "details": str(e)},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )
    except Exception as e:
        # Internal details are logged, never returned.
        logger.critical(f"An unexpected internal server error occurred during refresh: {e}", exc_info=True)
        return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    serializer = RefreshResultSerializer({"message": "Data refreshed successfully", **result})
    return Response(serializer.data, status=status.HTTP_200_OK)


# --- Country List and Detail Views ---

class CountryListView(generics.ListAPIView):
    """
    Handles GET /countries.
    Supports `?region=`, `?currency=` and `?sort=gdp_desc`.
    """
    queryset = Country.objects.all()
    serializer_class = CountrySerializer
    filterset_class = CountryFilter
    filter_backends = [DjangoFilterBackend, SortOrderingFilter]
    ordering_fields = ['estimated_gdp', 'name', 'population']
    ordering = ['id']


class CountryDetailView(generics.RetrieveDestroyAPIView):
    """
    Handles GET /countries/:name and DELETE /countries/:name.
    The name is matched case-insensitively.
    """
    queryset = Country.objects.all()
    serializer_class = CountrySerializer
    lookup_field = 'name'

    def get_object(self):
        # CountryNotFound is turned into a 404 by the project exception handler.
        obj = services.get_country(self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, obj)
        return obj

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        logger.info(f"Successfully retrieved country: {instance.name}")
        serializer = self.get_serializer(instance)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        services.delete_country(self.kwargs[self.lookup_field])
        return Response(status=status.HTTP_204_NO_CONTENT)


# --- Status and Image Endpoints ---

@swagger_auto_schema(method='get', responses={200: RefreshStatusSerializer})
@api_view(['GET'])
def status_view(request):
    """
    Handles GET /status.
    Returns the total number of cached countries and the last refresh timestamp.
    """
    logger.debug(f"Status endpoint requested by {request.META.get('REMOTE_ADDR')}")
    serializer = RefreshStatusSerializer(services.get_refresh_status())
    return Response(serializer.data)


@api_view(['GET'])
def summary_image_view(request):
    """
    Handles GET /countries/image.
    Serves the generated summary image file.
    """
    logger.debug(f"Image endpoint requested by {request.META.get('REMOTE_ADDR')}")
    path = get_summary_image_path()
    try:
        return FileResponse(open(path, 'rb'), content_type='image/png')
    except FileNotFoundError:
        # Removed between the existence check and the open.
        logger.warning(f"Summary image disappeared from {path}")
        raise SnapshotNotFound()
