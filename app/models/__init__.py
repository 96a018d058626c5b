# Parking inventory — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.parking_lot import ParkingLot                          # noqa
from app.models.zone import Zone                                       # noqa
from app.models.spot import Spot                                       # noqa
from app.models.occupation import Occupation                           # noqa
from app.models.subscription import Subscription, SubscriptionVehicle  # noqa
