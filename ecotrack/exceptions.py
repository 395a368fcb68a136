"""
Custom exceptions for the EcoTrack application.
Not-found errors map to 404, validation and business-rule errors to 400.
"""


class EcoTrackException(Exception):
    """Base exception for EcoTrack application"""
    pass


class NotFoundException(EcoTrackException):
    """Base for missing entities"""
    pass


class BusinessRuleException(EcoTrackException):
    """Base for rejected operations; the message is the reason shown to the client"""
    pass


class ValidationException(EcoTrackException):
    """Raised when request data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


class UserNotFoundException(NotFoundException):
    """Raised when a user is not found"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("No user found")


class AssessmentNotFoundException(NotFoundException):
    """Raised when a user has no carbon assessment"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("No assessment found")


class ActionNotFoundException(NotFoundException):
    """Raised when an eco action is not found"""
    def __init__(self, action_id: int):
        self.action_id = action_id
        super().__init__(f"Action with ID {action_id} not found")


class RewardNotFoundException(NotFoundException):
    """Raised when a marketplace reward is missing, inactive or expired"""
    def __init__(self, reward_id: int):
        self.reward_id = reward_id
        super().__init__("Reward not found")


class LedgerNotFoundException(NotFoundException):
    """Raised when a user has no rewards ledger row"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("User rewards not found")


class InsufficientPointsException(BusinessRuleException):
    """Raised when a user cannot afford a reward"""
    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__("Insufficient points")


class LevelRequirementException(BusinessRuleException):
    """Raised when a user's level is below a reward's requirement"""
    def __init__(self, level: int, required: int):
        self.level = level
        self.required = required
        super().__init__("Level requirement not met")


class OutOfStockException(BusinessRuleException):
    """Raised when a reward has no stock left"""
    def __init__(self, reward_id: int):
        self.reward_id = reward_id
        super().__init__("Reward out of stock")


class InvalidVerificationTransitionException(BusinessRuleException):
    """Raised when an action's verification status cannot change as requested"""
    def __init__(self, action_id: int, current_status: str, requested: str):
        self.action_id = action_id
        self.current_status = current_status
        self.requested = requested
        super().__init__(
            f"Action {action_id} is {current_status} and cannot become {requested}"
        )


class DatabaseException(EcoTrackException):
    """Raised when database operations fail"""
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Database {operation} failed: {details}")
