from app.models.user import User
from app.models.service import Service
from app.models.course import Course
from app.models.purchase import Purchase
from app.models.purchase_event import PurchaseEvent

# add ALL models here
