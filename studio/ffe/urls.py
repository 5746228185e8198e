from django.urls import path
from .views import (
    room_ffe, room_ffe_sections, ffe_section_detail, room_ffe_items, ffe_item_detail, room_ffe_bulk_state,
    section_presets
)

urlpatterns = [
    path('rooms/<int:pk>/ffe/', room_ffe, name='room-ffe'),
    path('rooms/<int:pk>/ffe/sections/', room_ffe_sections, name='room-ffe-sections'),
    path('rooms/<int:pk>/ffe/items/', room_ffe_items, name='room-ffe-items'),
    path('rooms/<int:pk>/ffe/items/bulk-state/', room_ffe_bulk_state, name='room-ffe-bulk-state'),
    path('ffe/sections/<int:pk>/', ffe_section_detail, name='ffe-section-detail'),
    path('ffe/items/<int:pk>/', ffe_item_detail, name='ffe-item-detail'),
    path('ffe/section-presets/', section_presets, name='ffe-section-presets'),
]
