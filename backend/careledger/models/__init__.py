from .orders import Order, OrderItem, OrderStatusHistory
from .doctors import DoctorVerificationRequest, DoctorProfile, Account
from .hospital import HospitalBed, OperationTheater, BedBooking
from .blood import BloodDonor, BloodRequest
from .support import SupportTicket, SystemAlert
from .auth import AdminUser, AdminSession
from .audit import LedgerAuditEntry

__all__ = [
    'Order', 'OrderItem', 'OrderStatusHistory',
    'DoctorVerificationRequest', 'DoctorProfile', 'Account',
    'HospitalBed', 'OperationTheater', 'BedBooking',
    'BloodDonor', 'BloodRequest',
    'SupportTicket', 'SystemAlert',
    'AdminUser', 'AdminSession',
    'LedgerAuditEntry',
]
