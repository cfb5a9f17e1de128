from dentalcare.listing.page_query import Page, PageQuery
from dentalcare.listing.search import ENTITY_SPECS, EntitySpec, MatchMode, SearchField, build_search_predicate
from dentalcare.listing.entity_query import EntityListQuery
from dentalcare.listing.periods import month_bounds, week_bounds
