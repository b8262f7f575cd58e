# Default kick-off layout in field coordinates (x cm, y cm, rotation deg).
# Blue defends the left goal and attacks towards +x.
BLUE_START = [
    (-102.5, 0.0, 0.0),
    (-81.2, 48.0, 0.0),
    (-81.2, -48.0, 0.0),
    (-30.0, 40.0, 0.0),
    (-30.0, -40.0, 0.0),
]

# Yellow is the point reflection of blue through the centre spot.
YELLOW_START = [
    (102.5, 0.0, 180.0),
    (81.2, -48.0, 180.0),
    (81.2, 48.0, 180.0),
    (30.0, -40.0, 180.0),
    (30.0, 40.0, 180.0),
]

BALL_START = (0.0, 0.0)
