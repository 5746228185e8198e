"""Default items created when a section is added from a preset"""

SECTION_PRESETS = {
    'Flooring': [
        {'name': 'Carpet Selection', 'description': 'Choose carpet material and color', 'is_required': True},
        {'name': 'Hardwood Selection', 'description': 'Choose hardwood type and finish', 'is_required': False},
        {'name': 'Area Rugs', 'description': 'Select area rugs', 'is_required': False},
    ],
    'Window Treatments': [
        {'name': 'Curtains/Drapes', 'description': 'Select curtain fabric and style', 'is_required': True},
        {'name': 'Blinds/Shades', 'description': 'Choose window blind type', 'is_required': False},
        {'name': 'Curtain Rods', 'description': 'Select curtain rod hardware', 'is_required': False},
    ],
    'Lighting': [
        {'name': 'Ceiling Light Fixture', 'description': 'Main overhead lighting', 'is_required': True},
        {'name': 'Table Lamps', 'description': 'Table or wall-mounted lamps', 'is_required': True},
        {'name': 'Task Lighting', 'description': 'Lighting for work surfaces', 'is_required': False},
        {'name': 'Floor Lamp', 'description': 'Additional ambient lighting', 'is_required': False},
    ],
    'Furniture': [
        {'name': 'Primary Seating', 'description': 'Sofa, bed or main seating piece', 'is_required': True},
        {'name': 'Side Tables', 'description': 'Side or bedside tables', 'is_required': True},
        {'name': 'Storage', 'description': 'Dresser, console or cabinet', 'is_required': False},
        {'name': 'Accent Chair', 'description': 'Reading chair or bench', 'is_required': False},
    ],
    'Decor & Accessories': [
        {'name': 'Wall Art', 'description': 'Artwork, mirrors or wall decor', 'is_required': False},
        {'name': 'Decorative Pillows', 'description': 'Throw pillows', 'is_required': False},
        {'name': 'Throw Blanket', 'description': 'Decorative throw', 'is_required': False},
        {'name': 'Plants/Vases', 'description': 'Greenery or decorative vases', 'is_required': False},
    ],
    'Plumbing Fixtures': [
        {'name': 'Toilet', 'description': 'Toilet fixture', 'is_required': True},
        {'name': 'Sink/Vanity', 'description': 'Sink and vanity', 'is_required': True},
        {'name': 'Faucet', 'description': 'Sink faucet', 'is_required': True},
        {'name': 'Shower/Tub', 'description': 'Shower or bathtub', 'is_required': False},
        {'name': 'Shower Head', 'description': 'Shower fixture', 'is_required': False},
    ],
    'Hardware': [
        {'name': 'Door Hardware', 'description': 'Handles, hinges and stops', 'is_required': True},
        {'name': 'Cabinet Hardware', 'description': 'Knobs and pulls', 'is_required': True},
        {'name': 'Hooks', 'description': 'Robe and coat hooks', 'is_required': False},
    ],
}


def preset_items(section_name):
    """Preset items for a section name, matched case-insensitively; empty when there is no preset"""
    wanted = (section_name or '').strip().lower()
    for name, items in SECTION_PRESETS.items():
        if name.lower() == wanted:
            return [dict(item, order=index) for index, item in enumerate(items)]
    return []


def preset_summary():
    return [
        {'name': name, 'item_count': len(items), 'items': items}
        for name, items in SECTION_PRESETS.items()
    ]
