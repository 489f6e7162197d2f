

# Register all models here

# User models
from app.users.user_models.user_model import AdminUserRow

# System models
from app.system_models.appointment_model.appointment_model import AppointmentRow
