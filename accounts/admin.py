from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin

from .models import UserPrivilege

User = get_user_model()


class UserPrivilegeInline(admin.TabularInline):
    model = UserPrivilege
    fk_name = 'user'
    extra = 0
    fields = ['privilege', 'expires_at', 'assigned_by', 'assigned_at']
    readonly_fields = ['assigned_by', 'assigned_at']


@admin.register(User)
class CustomUserAdmin(UserAdmin):
    model = User
    list_display = ['username', 'email', 'role', 'phone_number', 'is_active', 'is_locked']
    list_filter = ['role', 'is_active', 'is_locked', 'is_superuser']
    search_fields = ['username', 'email', 'first_name', 'last_name']
    inlines = [UserPrivilegeInline]
    fieldsets = (
        (None, {'fields': ('username', 'password')}),
        ('Personal info', {'fields': ('first_name', 'last_name', 'email', 'phone_number', 'address', 'date_of_birth')}),
        ('School', {'fields': ('role', 'assigned_classes', 'must_change_password')}),
        ('Lock', {'fields': ('is_locked', 'lock_reason', 'locked_at')}),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('username', 'email', 'role', 'phone_number', 'password1', 'password2'),
        }),
    )


@admin.register(UserPrivilege)
class UserPrivilegeAdmin(admin.ModelAdmin):
    list_display = ['user', 'privilege', 'assigned_by', 'assigned_at', 'expires_at']
    list_filter = ['privilege']
    search_fields = ['user__username', 'privilege']
