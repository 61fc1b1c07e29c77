"""
Models for the Travels app.
"""
from django.conf import settings
from django.db import models

from common.models import TimestampedModel


class Travel(TimestampedModel):
    """
    A travel planned within a group. Expenses and the budget hang off it.
    """
    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='travels',
    )
    name = models.CharField(max_length=200)
    destination = models.CharField(max_length=255, blank=True, default='')
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_travels',
    )

    class Meta:
        db_table = 'travels'
        ordering = ['-start_date', '-created_at']

    def __str__(self):
        return f'{self.name} ({self.group.name})'

    def clean(self):
        from django.core.exceptions import ValidationError
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError('End date must be after start date.')


class ItineraryItem(TimestampedModel):
    """
    A planned activity within a travel; an expense may point at one.
    """
    class Period(models.TextChoices):
        MORNING = 'morning', 'Morning'
        AFTERNOON = 'afternoon', 'Afternoon'
        EVENING = 'evening', 'Evening'

    travel = models.ForeignKey(
        Travel,
        on_delete=models.CASCADE,
        related_name='itinerary_items',
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    location = models.CharField(max_length=255, blank=True, default='')
    date = models.DateField()
    period = models.CharField(
        max_length=10,
        choices=Period.choices,
        default=Period.MORNING,
    )

    class Meta:
        db_table = 'itinerary_items'
        ordering = ['date', 'period']

    def __str__(self):
        return f'{self.title} ({self.date})'
