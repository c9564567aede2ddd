"""
Views for accounts app.

Includes:
- Authentication views (login, logout)
- Role decorator used by the dashboards
"""

from functools import wraps

from django.shortcuts import render, redirect
from django.contrib.auth import login, logout
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from apps.updates.recovery import RecoveryCache
from .forms import LoginForm


# =============================================================================
# Permission Decorators
# =============================================================================

def role_required(*roles, redirect_to='updates:my_updates'):
    """
    Decorator to require one of ``roles``.

    Anonymous users go to the login page; authenticated users with another
    role are sent to ``redirect_to``.
    """
    def decorator(view_func):
        @wraps(view_func)
        @login_required
        def _wrapped(request, *args, **kwargs):
            if request.user.role not in roles:
                messages.error(request, 'You do not have access to that page.')
                return redirect(redirect_to)
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


def home_url_for(user):
    """Landing page for a user after login."""
    if user.is_manager_or_above():
        return 'updates:team_updates'
    return 'updates:my_updates'


# =============================================================================
# Authentication Views
# =============================================================================

def login_view(request):
    """
    Custom login view with email authentication.
    """
    if request.user.is_authenticated:
        return redirect(home_url_for(request.user))

    if request.method == 'POST':
        form = LoginForm(request, request.POST)
        if form.is_valid():
            user = form.get_user()
            login(request, user)
            messages.success(request, f'Welcome back, {user.get_short_name()}!')

            next_url = request.POST.get('next') or request.GET.get('next')
            if next_url and url_has_allowed_host_and_scheme(
                next_url, allowed_hosts={request.get_host()}, require_https=request.is_secure()
            ):
                return redirect(next_url)
            return redirect(home_url_for(user))
        messages.error(request, 'Invalid email or password.')
    else:
        form = LoginForm()

    return render(request, 'accounts/login.html', {
        'form': form,
        'next': request.GET.get('next', ''),
    })


@require_POST
@login_required
def logout_view(request):
    """
    Log out the user and redirect to login page.

    The browser's recovery snapshots go too; only an expired session may
    fall back to them.
    """
    recovery = RecoveryCache.for_request(request)
    if recovery is not None:
        recovery.clear()
    logout(request)
    messages.success(request, 'You have been logged out successfully.')
    return redirect('accounts:login')
