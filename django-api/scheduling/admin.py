from django.contrib import admin

from scheduling.models import Booking, Child, ScheduleSlot, SessionType


class ScheduleSlotInline(admin.TabularInline):
    model = ScheduleSlot
    extra = 0
    fields = ["start_time", "end_time", "recurrence_tag"]
    readonly_fields = ["start_time", "end_time", "recurrence_tag"]


class BookingInline(admin.TabularInline):
    model = Booking
    extra = 0
    fields = ["child", "parent_id", "status", "created_at"]
    readonly_fields = ["child", "parent_id", "status", "created_at"]


@admin.register(SessionType)
class SessionTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "duration_minutes", "capacity", "credits", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name"]
    inlines = [ScheduleSlotInline]


@admin.register(ScheduleSlot)
class ScheduleSlotAdmin(admin.ModelAdmin):
    list_display = ["session_type", "start_time", "end_time", "recurrence_tag"]
    list_filter = ["session_type"]
    inlines = [BookingInline]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ["child", "slot", "status", "created_at"]
    list_filter = ["status", "slot__session_type"]


@admin.register(Child)
class ChildAdmin(admin.ModelAdmin):
    list_display = ["first_name", "last_name", "parent_id", "is_active"]
    search_fields = ["first_name", "last_name"]
