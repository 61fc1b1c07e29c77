"""
Admin configuration for the Travels app.
"""
from django.contrib import admin

from apps.travels.models import ItineraryItem, Travel


class ItineraryItemInline(admin.TabularInline):
    model = ItineraryItem
    extra = 0
    ordering = ['date', 'period']


@admin.register(Travel)
class TravelAdmin(admin.ModelAdmin):
    list_display = ['name', 'destination', 'group', 'start_date', 'end_date', 'created_by', 'created_at']
    list_filter = ['start_date', 'created_at']
    search_fields = ['name', 'destination', 'group__name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ItineraryItemInline]


@admin.register(ItineraryItem)
class ItineraryItemAdmin(admin.ModelAdmin):
    list_display = ['title', 'travel', 'date', 'period', 'location']
    list_filter = ['period', 'travel__group']
    search_fields = ['title', 'description', 'location']
    ordering = ['travel', 'date']
