"""User facing reply texts."""

from __future__ import annotations

SENDER_UNKNOWN = "Failed to find the sender of this message"
NO_REPLY_STICKER = "Reply to a sticker to use this command"
TAG_NOT_AUTHORIZED = "You're not authorized to tag stickers"
TAGGED_STICKER = "Tagged the sticker with the following tags:"
TAGS_NOT_APPLIED = "These tags could not be saved, please try again:"
NO_TAGS = "Tell me which tags to add, e.g. /tag cute cat"
USERNAME_MISSING = "You must set a username (check your Telegram settings)"
NEED_APPROVAL = "Great! Now tell the admin to approve your request"
ALREADY_REGISTERED = "You have already registered"
ALREADY_ALLOWED = "You are already allowed to tag stickers"
NOT_REGISTERED = "The specified user has not registered"
WRONG_ARGNUM = "Wrong number of arguments"
NO_PERM = "*You're not supposed to do that*"
NO_STICKER_SET = "Tagging is only supported for stickers that are contained in sticker sets"
STICKER_UNTAGGED = "This sticker is not tagged"
UNTAG_SUCCESS = "Successfully removed the specified tags"
UNTAG_NOTHING = "None of the specified tags were yours to remove"
TAGS_ON_STICKER = "Tags on this sticker:"
ALLOWED_USER = "Allowed {username} to tag stickers"
GENERIC_FAILURE = "Something went wrong, please try again later"
HELP_INTRO = "To search for stickers, simply tag the bot and type your keywords."
