# pylint: skip-file

"""
English Strings.

All strings displayed to discord users will be taken from this file; all
logger messages are hardcoded and shouldn't be in here. %PREFIX% is
replaced with the command prefix and %COMMAND% with the command word.

Pylint skips this file since this is more like a config file than actual
code.
"""

"""'''''''''''
Command Errors
'''''''''''"""

# General Headers
command_error_header = "**Error:** "
command_error_logger_header = "Command error {} triggered by command: {}"
command_error_failed_to_send = "Failed to send user error message to channel {}: {}"

# Command invocation exceptions
command_error_user_input_error = "User input error."
command_error_bad_argument = "Invalid argument."
command_error_missing_required_argument = "Missing required argument."
command_error_unexpected_quote_error = "Encountered unexpected quote mark inside non-quoted string."
command_error_invalid_end_of_quoted_string_error = "Invalid end of quoted string."
command_error_expected_closing_quote_error = "Did not find closing quote character."
command_error_no_private_message = "Command cannot be used in Private Message."
command_error_invoke_error = "Command raised internal error."

"""''''''''''''
Event Scheduler
''''''''''''"""

# Store
sched_no_events = "There are no events currently scheduled"
sched_summary = "{}: {} scheduled for {}"
sched_responses = "Yes: {}\nNo: {}\nMaybe: {}"

# Command replies
sched_create_success = "New event {} scheduled for {} with id {}"
sched_delete_success = "Deleted event {}: {}"
sched_accept_success = "{} is attending {}"
sched_decline_success = "{} is not attending {}"
sched_maybe_success = "{} might attend {}"
sched_unknown_command = "Command not recognised"

# Errors
sched_not_found_title = "Event not found"
sched_not_found_desc = "No event found with id {}"
sched_empty_name_title = "Invalid event name"
sched_empty_name_desc = "Event name cannot be empty"
sched_bad_time_title = "Invalid time"
sched_bad_time_desc = "Could not understand time: {}"
sched_past_time_title = "Invalid time"
sched_past_time_desc = "Cannot create an event in the past"
sched_missing_args_title = "Missing arguments"
sched_missing_args_desc = "Usage: %PREFIX%%COMMAND% {}"
sched_save_failed_title = "Failed to save events"
sched_save_failed_desc = "Your change could not be saved, please try again later."

# Usage lines
sched_usage_create = "create <name> <time>"
sched_usage_id = "{} <id>"

sched_help = """Usage: %PREFIX%%COMMAND% <COMMAND> <ARGS>
where <COMMAND> one of:
list
  List all registered future events
create name time
  Create a new event at the given time (quote names with spaces)
delete id
  Delete the event with the given id
accept|yes id
  Register for the event with the given id
decline|no id
  Decline the event with the given id
maybe id
  Sit on the fence for the event with the given id (Don't be that guy!)
responses id
  List the responses to the event (yes, no, maybe)"""
