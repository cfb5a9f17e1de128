from dentalcare.dashboard.aggregator import (
    DashboardAggregator,
    DashboardSnapshot,
    RecentPatient,
    StatisticItem,
    UpcomingAppointment,
)
