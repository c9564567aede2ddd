"""
URL configuration for the daily_updates project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.views.generic import RedirectView

urlpatterns = [
    path('admin/', admin.site.urls),

    # App URLs
    path('', include('apps.accounts.urls', namespace='accounts')),
    path('updates/', include('apps.updates.urls', namespace='updates')),
    path('', RedirectView.as_view(pattern_name='updates:my_updates', permanent=False), name='home'),
]

# Debug toolbar is only installed by the development settings
if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [
        path('__debug__/', include(debug_toolbar.urls)),
    ] + urlpatterns

# Admin site customization
admin.site.site_header = 'Daily Updates Administration'
admin.site.site_title = 'Daily Updates Admin'
admin.site.index_title = 'Teams, members and daily updates'
