"""Staffing Timesheets package.

Weekly timesheet generation for a staffing back office: week periods, daily
hours, overtime allocation, pay/bill calculation and reconciliation against
persisted timesheets. Organized by feature modules (periods, positions,
timesheets, payroll) with a thin Flask controller layer on top of
service/repository layers.
"""
