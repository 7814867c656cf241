from .user_settings import UserSettings
from .media_image import MediaImage
from .page import Page
from .page_section import PageSection
from .creative import Banner, Thumbnail
from .lp_template import LpTemplate, LpTemplateSection
from .subscription import Subscription
from .generation_run import GenerationRun
from .credit import CreditBalance, CreditTransaction
from .contact_inquiry import ContactInquiry
from .global_config import GlobalConfig
from .form_submission import FormSubmission
from .upgrade_request import UpgradeRequest
from .waiting_room import WaitingRoomEntry, WaitingRoomReply

__all__ = [
    "UserSettings",
    "MediaImage",
    "Page",
    "PageSection",
    "Banner",
    "Thumbnail",
    "LpTemplate",
    "LpTemplateSection",
    "Subscription",
    "GenerationRun",
    "CreditBalance",
    "CreditTransaction",
    "ContactInquiry",
    "GlobalConfig",
    "FormSubmission",
    "UpgradeRequest",
    "WaitingRoomEntry",
    "WaitingRoomReply",
]
